"""
Dispatch result value object.

The return value is the only visibility contract of a dispatch:
- success=False: nothing was done (unrecognized intent, unavailable step)
- success=True, noop=False: an engine operation was performed
- success=True, noop=True: intentionally skipped, engine already in the
  target state
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from intents.action import ActionId


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    message: str
    action: ActionId | None = None
    noop: bool = False

    @staticmethod
    def ok(action: ActionId, message: str) -> DispatchResult:
        return DispatchResult(success=True, message=message, action=action)

    @staticmethod
    def skipped(action: ActionId, message: str) -> DispatchResult:
        return DispatchResult(success=True, message=message, action=action, noop=True)

    @staticmethod
    def failed(message: str, action: ActionId | None = None) -> DispatchResult:
        return DispatchResult(success=False, message=message, action=action)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "action": self.action.value if self.action is not None else None,
            "noop": self.noop,
        }
