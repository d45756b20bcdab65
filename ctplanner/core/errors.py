"""Planner error types.

All errors are raised synchronously by the operation that detects them
and carry a message suitable for display.
"""


class PlannerError(Exception):
    """Base class for all planner errors."""


class ValidationError(PlannerError, ValueError):
    """A settings field or geometry input is not a valid finite number."""


class NotFoundError(PlannerError, KeyError):
    """Unknown system or detector identifier."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message for display.
        return str(self.args[0]) if self.args else ""


class InvalidRangeError(PlannerError, ValueError):
    """SOD sweep range cannot be iterated (non-positive step, min > max)."""
