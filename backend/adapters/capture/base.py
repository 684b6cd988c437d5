"""
Speech-capture adapter contract.

This module defines the *interface only*. No timers, no state machine, no
intent resolution live here.

Key invariants:
- The adapter emits capture events (started / result / error / ended)
  through the async event sink it was constructed with; it never calls
  the reducer or makes state transitions.
- At most one final result per utterance; zero if stopped before speech
  or aborted.
- abort() may be called after capture already ended and must be safe.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Protocol

from orchestrator.events import Event


EventSink = Callable[[Event], Awaitable[None]]


class CaptureAlreadyStartedError(RuntimeError):
    """start() was called while the collaborator is already capturing."""


class SpeechCapture(ABC):
    """
    Abstract interface for a speech-capture collaborator.

    Implementations are responsible for:
    - Starting capture and reporting CaptureStarted
    - Reporting interim and final CaptureResult events
    - Reporting CaptureError codes ("no-speech", "audio-capture",
      "not-allowed", "network", "aborted", ...)
    - Reporting CaptureEnded exactly once per started capture

    Non-responsibilities:
    - No timeout policy
    - No intent resolution
    - No retry
    """

    @abstractmethod
    async def start(self) -> None:
        """
        Begin capturing.

        Raises:
            CaptureAlreadyStartedError if a capture is already running.
            Any other exception is a start failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def stop(self) -> None:
        """
        Stop capturing, allowing a pending result to be delivered.

        Completion is reported asynchronously via CaptureEnded.
        """
        raise NotImplementedError

    @abstractmethod
    async def abort(self) -> None:
        """
        Stop capturing immediately and discard pending results.

        Must be idempotent and safe after capture has ended.
        """
        raise NotImplementedError


class CaptureFactory(Protocol):
    """
    Capability provider.

    Returns a collaborator wired to emit into `emit_event`, or None when
    speech capture is unavailable on this host.
    """

    def __call__(self, emit_event: EventSink) -> SpeechCapture | None: ...
