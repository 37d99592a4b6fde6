"""Default planning rules: Event -> Intervention fields."""

import zlib
from dataclasses import dataclass
from typing import Any, Callable

from ..models import Event, EventType, InterventionType, Severity

BREATHING_DURATION = 60  # seconds
BREATHING_PATTERN = "4-7-8"
DEFAULT_RULE_PRIORITY = 10

QUOTES = [
    ("You have power over your mind, not outside events. Realize this, and you will find strength.", "Marcus Aurelius"),
    ("We suffer more often in imagination than in reality.", "Seneca"),
    ("No man is free who is not master of himself.", "Epictetus"),
    ("The impediment to action advances action. What stands in the way becomes the way.", "Marcus Aurelius"),
    ("Difficulties strengthen the mind, as labor does the body.", "Seneca"),
]

COGNITIVE_QUESTIONS = [
    "What is the worst that could realistically happen here?",
    "Which part of this is within your control right now?",
    "What would you tell a friend in the same situation?",
]


PlanFn = Callable[[Event], dict[str, Any]]


@dataclass(frozen=True)
class Rule:
    """Maps a set of event types onto intervention fields.

    When several rules match an event the one with the highest priority
    wins; equal priorities fall back to the order the rules were added.
    """

    name: str
    event_types: frozenset[EventType]
    plan: PlanFn
    description: str = ""
    priority: int = 0

    def matches(self, event: Event) -> bool:
        return event.type in self.event_types


def _pick(items: list, event: Event):
    """Deterministically pick an item for an event."""
    return items[zlib.crc32(event.id.encode()) % len(items)]


def plan_breathing_exercise(event: Event) -> dict[str, Any]:
    usage = (event.value or 0.0) * 100
    return {
        "type": InterventionType.SUGGEST_BREATHING,
        "reason": (
            f"Detected {event.severity.value} CPU usage ({usage:.0f}%). "
            "A short break could be helpful."
        ),
        "urgency": 0.9 if event.severity == Severity.CRITICAL else 0.6,
        "parameters": {
            "duration": BREATHING_DURATION,
            "pattern": BREATHING_PATTERN,
        },
    }


def plan_motivational_quote(event: Event) -> dict[str, Any]:
    quote, author = _pick(QUOTES, event)
    return {
        "type": InterventionType.SHOW_QUOTE,
        "reason": f"A build failed ({event.source}). A moment of perspective may help.",
        "urgency": 0.3,
        "parameters": {"quote": quote, "author": author},
    }


def plan_cognitive_question(event: Event) -> dict[str, Any]:
    return {
        "type": InterventionType.ASK_COGNITIVE_QUESTION,
        "reason": "Repeated git resets suggest frustration with the current task.",
        "urgency": 0.5,
        "parameters": {"question": _pick(COGNITIVE_QUESTIONS, event)},
    }


def default_rules() -> list[Rule]:
    return [
        Rule(
            name="cpu_breathing",
            event_types=frozenset(
                {EventType.CPU_USAGE_WARNING, EventType.CPU_USAGE_CRITICAL}
            ),
            plan=plan_breathing_exercise,
            description="Suggest a breathing exercise on high CPU load",
            priority=DEFAULT_RULE_PRIORITY,
        ),
        Rule(
            name="build_failed_quote",
            event_types=frozenset({EventType.BUILD_FAILED}),
            plan=plan_motivational_quote,
            description="Show a stoic quote after a failed build",
            priority=DEFAULT_RULE_PRIORITY,
        ),
        Rule(
            name="git_reset_question",
            event_types=frozenset({EventType.GIT_RESET_FREQUENT}),
            plan=plan_cognitive_question,
            description="Ask a reframing question after frequent git resets",
            priority=DEFAULT_RULE_PRIORITY,
        ),
    ]
