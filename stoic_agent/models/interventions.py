"""Intervention-related data models."""

import copy
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .events import _new_id, _utcnow


class InterventionType(str, Enum):
    """Remediations a planner can propose."""

    SUGGEST_BREATHING = "suggest_breathing_exercise"
    SUGGEST_SCREAM = "suggest_scream_session"
    ASK_COGNITIVE_QUESTION = "ask_cognitive_question"
    SHOW_QUOTE = "show_motivational_quote"


class Intervention(BaseModel):
    """An immutable proposed remediation.

    `parameters` is deep-copied on construction and is read-only by
    convention.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    type: InterventionType
    source: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=_utcnow)
    urgency: float = Field(ge=0.0, le=1.0)
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("parameters", mode="before")
    @classmethod
    def _copy_parameters(cls, value: Any) -> Any:
        return copy.deepcopy(value)
