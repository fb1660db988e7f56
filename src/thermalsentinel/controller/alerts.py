"""
Overheat Alert State Machine
============================
Raises and retracts the dashboard notification from live max-temperature
readings.

States: IDLE -> TRIGGERED -> SENT -> IDLE.

    * IDLE/SENT -> TRIGGERED when the reading exceeds `high` and at least
      `cooldown_s` passed since the previous trigger. A TRIGGERED state is
      never re-entered; it always runs on to SENT or is cleared.
    * TRIGGERED -> SENT after `sent_delay_s` (simulated dispatch latency).
    * SENT -> IDLE after `display_s`.
    * TRIGGERED/SENT -> IDLE immediately when a reading drops below `low`.

Delayed transitions are ScheduledEvent entries, fired by `advance(now)`.
The machine never reads a wall clock itself.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Callable, Optional

from thermalsentinel.config import ALERT_EMAIL, AlertThresholds

logger = logging.getLogger(__name__)


class NotificationPhase(StrEnum):
    IDLE = "idle"
    TRIGGERED = "triggered"
    SENT = "sent"


@dataclass(frozen=True)
class NotificationState:
    phase: NotificationPhase = NotificationPhase.IDLE
    message: str = ""
    sub_message: str = ""
    last_trigger_time: Optional[float] = None

    @property
    def visible(self) -> bool:
        return self.phase != NotificationPhase.IDLE

    @property
    def is_alert(self) -> bool:
        return self.phase == NotificationPhase.TRIGGERED


@dataclass(frozen=True, order=True)
class ScheduledEvent:
    due: float
    target: NotificationPhase = field(compare=False)


Listener = Callable[[NotificationState, NotificationState], None]


class AlertStateMachine:
    def __init__(self, thresholds: Optional[AlertThresholds] = None, recipient: str = ALERT_EMAIL) -> None:
        self.thresholds = thresholds or AlertThresholds()
        self.recipient = recipient
        self._state = NotificationState()
        self._pending: list[ScheduledEvent] = []
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def state(self) -> NotificationState:
        return self._state

    @property
    def phase(self) -> NotificationPhase:
        return self._state.phase

    @property
    def pending_events(self) -> tuple[ScheduledEvent, ...]:
        return tuple(self._pending)

    def next_due(self) -> Optional[float]:
        return self._pending[0].due if self._pending else None

    def add_listener(self, listener: Listener) -> None:
        """listener(old_state, new_state) is called after every transition."""
        self._listeners.append(listener)

    def on_reading(self, max_temp: float, now: float) -> NotificationState:
        """Feed one poll tick. Due timers fire first, then thresholds are checked."""
        self.advance(now)
        t = self.thresholds

        if max_temp < t.low and self._state.visible:
            logger.info(f"Reading {max_temp:.1f} °C below {t.low:.1f} °C, clearing notification.")
            self._pending.clear()
            self._transition(replace(self._state, phase=NotificationPhase.IDLE, message="", sub_message=""))
        elif max_temp > t.high and self.phase != NotificationPhase.TRIGGERED and self._cooldown_elapsed(now):
            self._trigger(max_temp, now)

        return self._state

    def advance(self, now: float) -> NotificationState:
        """Fire every scheduled transition due at or before `now`, in order."""
        while self._pending and self._pending[0].due <= now:
            event = self._pending.pop(0)
            if event.target == NotificationPhase.SENT:
                self._transition(replace(
                    self._state,
                    phase=NotificationPhase.SENT,
                    message="Alert email sent",
                    sub_message=f"Notification dispatched to {self.recipient}",
                ))
                self._schedule(event.due + self.thresholds.display_s, NotificationPhase.IDLE)
            else:
                self._transition(replace(self._state, phase=NotificationPhase.IDLE, message="", sub_message=""))
        return self._state

    def reset(self) -> None:
        self._pending.clear()
        self._state = NotificationState()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _cooldown_elapsed(self, now: float) -> bool:
        last = self._state.last_trigger_time
        return last is None or now - last >= self.thresholds.cooldown_s

    def _trigger(self, max_temp: float, now: float) -> None:
        logger.warning(f"Critical temperature {max_temp:.1f} °C, raising notification.")
        self._pending.clear()
        self._transition(NotificationState(
            phase=NotificationPhase.TRIGGERED,
            message=f"Critical temperature alert! ({max_temp:.1f} °C)",
            sub_message="Sending notifications to the support team...",
            last_trigger_time=now,
        ))
        self._schedule(now + self.thresholds.sent_delay_s, NotificationPhase.SENT)

    def _schedule(self, due: float, target: NotificationPhase) -> None:
        self._pending.append(ScheduledEvent(due=due, target=target))
        self._pending.sort()

    def _transition(self, new_state: NotificationState) -> None:
        old_state = self._state
        self._state = new_state
        if old_state.phase != new_state.phase:
            logger.info(f"Notification {old_state.phase} -> {new_state.phase}")
        for listener in self._listeners:
            listener(old_state, new_state)
