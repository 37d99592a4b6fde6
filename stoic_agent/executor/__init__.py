"""Executor module."""

from .executor import (
    ExecutorService,
    IExecutor,
    build_breathing_request,
    build_question_request,
    build_quote_request,
)

__all__ = [
    "ExecutorService",
    "IExecutor",
    "build_breathing_request",
    "build_question_request",
    "build_quote_request",
]
