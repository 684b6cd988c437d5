"""
Resolved intent variants.

Rules:
- Exactly one variant is produced per resolution call (or None for empty
  input, which callers treat as a no-op).
- Variants are immutable value objects; every field is always populated.
- to_dict() is the wire format sent to clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from constants import MSG_COMMAND_NOT_RECOGNIZED
from intents.action import ActionId


@dataclass(frozen=True)
class CommandIntent:
    """Transcript matched a command-table keyword."""

    action: ActionId
    feedback: str
    transcript: str
    matched_keyword: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "feedback": self.feedback,
            "transcript": self.transcript,
            "matchedKeyword": self.matched_keyword,
        }


@dataclass(frozen=True)
class SearchIntent:
    """Free-text fallback: transcript started with a search prefix."""

    feedback: str
    transcript: str
    query: str
    action: ActionId = ActionId.SEARCH

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "feedback": self.feedback,
            "transcript": self.transcript,
            "query": self.query,
        }


@dataclass(frozen=True)
class UnknownIntent:
    """Neither a keyword nor a search prefix matched."""

    transcript: str
    feedback: str = MSG_COMMAND_NOT_RECOGNIZED
    action: ActionId = ActionId.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "feedback": self.feedback,
            "transcript": self.transcript,
        }


ResolvedIntent = Union[CommandIntent, SearchIntent, UnknownIntent]


def intent_to_dict(intent: ResolvedIntent | None) -> dict[str, Any] | None:
    """Serialize an optional intent for JSON transport."""
    if intent is None:
        return None
    return intent.to_dict()
