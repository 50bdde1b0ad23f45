"""seldrive action execution layer.

Runs named actions against selector strings and reports ActionResult
records, for callers that need results instead of exceptions.
"""

from seldrive.actions.executor import VALID_ACTIONS, ActionExecutor, ActionResult

__all__ = ["ActionExecutor", "ActionResult", "VALID_ACTIONS"]
