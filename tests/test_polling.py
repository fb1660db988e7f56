import pytest

from thermalsentinel.controller.alerts import AlertStateMachine, NotificationPhase
from thermalsentinel.controller.clock import VirtualClock
from thermalsentinel.controller.polling import PollingLoop, build_history
from thermalsentinel.model.api import ApiError

from conftest import make_alert, make_status


class ScriptedSource:
    """Returns one scripted reading per poll; an Exception entry is raised instead."""

    def __init__(self, readings, alerts=()):
        self.readings = list(readings)
        self.alerts = list(alerts)
        self.polls = 0

    def get_live_status(self):
        reading = self.readings[min(self.polls, len(self.readings) - 1)]
        self.polls += 1
        if isinstance(reading, Exception):
            raise reading
        return make_status(reading)

    def get_alerts(self):
        return self.alerts


@pytest.fixture
def clock():
    return VirtualClock()


def make_loop(source, clock, **kwargs):
    return PollingLoop(source, AlertStateMachine(), clock=clock, interval_s=3.0, **kwargs)


def test_poll_updates_snapshot_and_feeds_machine(clock):
    loop = make_loop(ScriptedSource([65.0]), clock)
    snapshot = loop.poll_once()
    assert snapshot.status.current_max_temp == 65.0
    assert snapshot.tick_count == 1
    assert snapshot.last_error is None
    assert loop.machine.phase == NotificationPhase.TRIGGERED


def test_error_keeps_previous_status(clock):
    loop = make_loop(ScriptedSource([48.0, ApiError("/live", "connection failed")]), clock)
    loop.poll_once()
    clock.advance(3.0)
    snapshot = loop.poll_once()
    assert snapshot.status.current_max_temp == 48.0
    assert "connection failed" in snapshot.last_error
    assert snapshot.tick_count == 2


def test_error_still_advances_notification(clock):
    loop = make_loop(ScriptedSource([65.0, ApiError("/live", "down")]), clock)
    loop.poll_once()
    clock.advance(3.0)
    loop.poll_once()
    assert loop.machine.phase == NotificationPhase.SENT


def test_listeners_receive_every_snapshot(clock):
    seen = []
    loop = make_loop(ScriptedSource([40.0]), clock)
    loop.add_listener(seen.append)
    loop.poll_once()
    loop.poll_once()
    assert [s.tick_count for s in seen] == [1, 2]


def test_history_is_oldest_first_and_bounded():
    alerts = [make_alert(float(t)) for t in range(20, 0, -1)]  # newest first
    history = build_history(alerts, length=15)
    assert len(history) == 15
    assert [p.timestamp for p in history] == [float(t) for t in range(6, 21)]


def test_history_from_loop(clock):
    alerts = [make_alert(300.0, 80.0), make_alert(200.0, 70.0)]
    loop = make_loop(ScriptedSource([40.0], alerts), clock)
    assert [p.temp for p in loop.poll_once().history] == [70.0, 80.0]


def test_run_drives_timers_between_ticks(clock):
    source = ScriptedSource([65.0, 62.0, 62.0, 62.0])
    loop = make_loop(source, clock)
    phases = []
    loop.machine.add_listener(lambda old, new: phases.append((clock.now(), new.phase)))

    loop.run(max_ticks=4, sleep=clock.advance)

    assert source.polls == 4
    assert phases == [
        (0.0, NotificationPhase.TRIGGERED),
        (2.5, NotificationPhase.SENT),
        (7.5, NotificationPhase.IDLE),
    ]
    assert clock.now() == pytest.approx(12.0)


def test_interval_must_be_positive(clock):
    with pytest.raises(ValueError):
        PollingLoop(ScriptedSource([40.0]), AlertStateMachine(), clock=clock, interval_s=0)
