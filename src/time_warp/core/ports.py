# src/time_warp/core/ports.py

from __future__ import annotations

"""
Ports (callable shapes) the engine accepts from the outside.

The engine only ever calls these; it never imports concrete consumers
(heartbeat, console, file logger).
"""

from typing import TYPE_CHECKING, Any, Awaitable, Protocol

if TYPE_CHECKING:
    from .events import SchedulerEvent


class TaskCallback(Protocol):
    """Unit of work. May return an awaitable that the engine waits for."""
    def __call__(self) -> Awaitable[Any] | Any: ...


class CustomCurve(Protocol):
    """Raw interval in ms; any sign or magnitude, the engine clamps it."""
    def __call__(self, elapsed: float, duration: float, amplitude: float, scale: float) -> float: ...


class EventSubscriber(Protocol):
    def __call__(self, event: SchedulerEvent) -> None: ...


class Clock(Protocol):
    """Milliseconds since the epoch."""
    def __call__(self) -> float: ...
