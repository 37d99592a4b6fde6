"""Exception types raised by the agent."""


class StoicAgentError(Exception):
    """Base class for agent errors."""


class ConfigurationError(StoicAgentError, ValueError):
    """Invalid agent configuration. Fatal at startup."""


class SamplingError(StoicAgentError):
    """A metrics source could not produce a sample for this tick."""


class NotificationError(StoicAgentError):
    """The notification sink rejected or failed a request."""
