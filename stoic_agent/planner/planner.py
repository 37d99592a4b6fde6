"""Rule-based planner implementation."""

from typing import Protocol

from pydantic import ValidationError

from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import Event, Intervention, Topic
from .rules import Rule, default_rules

logger = get_logger(__name__)

SOURCE = "simple-rules-planner"


class IPlanner(Protocol):
    """Turns Events into Interventions."""

    async def start(self) -> None:
        """Subscribe to EventBus topic: EVENT."""
        ...

    async def stop(self) -> None:
        """Unsubscribe from EventBus."""
        ...

    async def handle_event(self, event: Event) -> Intervention | None:
        """Plan and publish an intervention for the event, if a rule matches."""
        ...


class RulesPlanner:
    """Deterministic planner: the highest-priority matching rule wins.

    Ties go to the rule added first, so a custom rule needs a priority above
    DEFAULT_RULE_PRIORITY to override a default one.

    Each event is evaluated on its own; the planner keeps no history.
    """

    def __init__(self, event_bus: IEventBus, rules: list[Rule] | None = None):
        self._event_bus = event_bus
        self._rules: list[Rule] = []
        for rule in default_rules() if rules is None else rules:
            self.add_rule(rule)

    @property
    def name(self) -> str:
        return SOURCE

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def add_rule(self, rule: Rule) -> None:
        """Append a rule. Names must be unique."""
        if any(existing.name == rule.name for existing in self._rules):
            raise ValueError(f"Rule with name '{rule.name}' already exists")
        self._rules.append(rule)
        logger.debug("Added rule %s", rule.name)

    def remove_rule(self, name: str) -> bool:
        """Remove a rule by name. Returns False if there was none."""
        for rule in self._rules:
            if rule.name == name:
                self._rules.remove(rule)
                logger.debug("Removed rule %s", name)
                return True
        return False

    def match(self, event: Event) -> Rule | None:
        """Return the rule that would handle the event, if any."""
        best = None
        for rule in self._rules:
            if rule.matches(event) and (best is None or rule.priority > best.priority):
                best = rule
        return best

    async def start(self) -> None:
        """Subscribe to EVENT topic."""
        self._event_bus.subscribe(Topic.EVENT, self.handle_event)

    async def stop(self) -> None:
        """Unsubscribe from EVENT topic."""
        self._event_bus.unsubscribe(Topic.EVENT, self.handle_event)

    async def handle_event(self, event: Event) -> Intervention | None:
        """Handle incoming Event from EventBus."""
        logger.info("Planner received event: %s", event.type.value)

        rule = self.match(event)
        if rule is None:
            logger.debug("No rule for event type: %s", event.type.value)
            return None

        payload = {"source": SOURCE, **rule.plan(event)}
        try:
            intervention = Intervention.model_validate(payload)
        except ValidationError as e:
            logger.error(
                "Invalid intervention from rule %s: %s",
                rule.name,
                e,
                extra={"context": {"payload": payload, "errors": e.errors()}},
            )
            return None

        logger.info(
            "Firing intervention: %s (rule=%s, urgency=%.2f)",
            intervention.type.value,
            rule.name,
            intervention.urgency,
        )
        await self._event_bus.publish(Topic.INTERVENTION, intervention)
        return intervention
