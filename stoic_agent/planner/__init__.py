"""Planner module."""

from .planner import IPlanner, RulesPlanner
from .rules import DEFAULT_RULE_PRIORITY, Rule, default_rules

__all__ = ["IPlanner", "RulesPlanner", "Rule", "default_rules", "DEFAULT_RULE_PRIORITY"]
