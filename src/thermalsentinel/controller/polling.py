"""
Live Telemetry Polling
======================
Fixed-interval driver for the dashboard: fetch live status and the alert
history, feed the alert state machine, keep the latest snapshot.

The loop is split in two halves so the GUI can run the network part on a
worker thread:
    fetch()  - blocking I/O only, safe off the GUI thread.
    apply()  - state updates, GUI thread only.
poll_once() chains both for headless use and tests.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence

from thermalsentinel.config import HISTORY_LENGTH, POLL_INTERVAL_MS
from thermalsentinel.controller.alerts import AlertStateMachine
from thermalsentinel.controller.clock import Clock, MonotonicClock
from thermalsentinel.model.records import AlertRecord, HistoryPoint, LiveStatus

logger = logging.getLogger(__name__)


class TelemetrySource(Protocol):
    def get_live_status(self) -> LiveStatus: ...

    def get_alerts(self) -> list[AlertRecord]: ...


@dataclass(frozen=True)
class PollResult:
    status: LiveStatus
    alerts: list[AlertRecord]


@dataclass
class TelemetrySnapshot:
    status: Optional[LiveStatus] = None
    history: list[HistoryPoint] = field(default_factory=list)
    last_error: Optional[str] = None
    updated_at: Optional[float] = None
    tick_count: int = 0


def build_history(alerts: Sequence[AlertRecord], length: int = HISTORY_LENGTH) -> list[HistoryPoint]:
    """Newest `length` alerts (the backend lists newest first), returned oldest first."""
    return [HistoryPoint.from_alert(a) for a in reversed(list(alerts)[:length])]


class PollingLoop:
    def __init__(
        self,
        source: TelemetrySource,
        machine: AlertStateMachine,
        clock: Optional[Clock] = None,
        interval_s: float = POLL_INTERVAL_MS / 1000.0,
        history_length: int = HISTORY_LENGTH,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.source = source
        self.machine = machine
        self.clock = clock or MonotonicClock()
        self.interval_s = interval_s
        self.history_length = history_length
        self.snapshot = TelemetrySnapshot()
        self._listeners: list[Callable[[TelemetrySnapshot], None]] = []

    def add_listener(self, listener: Callable[[TelemetrySnapshot], None]) -> None:
        self._listeners.append(listener)

    def fetch(self) -> PollResult:
        """Blocking network half. Raises ApiError on any transport problem."""
        status = self.source.get_live_status()
        alerts = self.source.get_alerts()
        return PollResult(status=status, alerts=alerts)

    def apply(self, result: PollResult) -> TelemetrySnapshot:
        """Most recent completed poll wins; the alert machine sees every reading."""
        now = self.clock.now()
        self.snapshot = TelemetrySnapshot(
            status=result.status,
            history=build_history(result.alerts, self.history_length),
            last_error=None,
            updated_at=now,
            tick_count=self.snapshot.tick_count + 1,
        )
        self.machine.on_reading(result.status.current_max_temp, now)
        self._notify()
        return self.snapshot

    def apply_error(self, error: str | Exception) -> TelemetrySnapshot:
        """Keep the previous telemetry on screen, remember what went wrong."""
        logger.error(f"Dashboard sync error: {error}")
        self.snapshot.last_error = str(error)
        self.snapshot.tick_count += 1
        # Scheduled notification phases keep running while the backend is down
        self.machine.advance(self.clock.now())
        self._notify()
        return self.snapshot

    def poll_once(self) -> TelemetrySnapshot:
        try:
            result = self.fetch()
        except Exception as e:  # ApiError, or a broken source
            return self.apply_error(e)
        return self.apply(result)

    def run(self, max_ticks: Optional[int] = None, sleep: Callable[[float], None] = time.sleep) -> None:
        """Headless driver: poll, then fire alert timers until the next tick is due."""
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            started = self.clock.now()
            self.poll_once()
            ticks += 1
            next_tick = started + self.interval_s
            while True:
                now = self.clock.now()
                if now >= next_tick:
                    break
                due = self.machine.next_due()
                wake = next_tick if due is None else min(due, next_tick)
                sleep(max(0.0, wake - now))
                self.machine.advance(self.clock.now())

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self.snapshot)
