import pytest

from thermalsentinel.config import AlertThresholds
from thermalsentinel.controller.alerts import AlertStateMachine, NotificationPhase


@pytest.fixture
def machine():
    return AlertStateMachine(recipient="ops@example.com")


def record_phases(machine):
    phases = []
    machine.add_listener(lambda old, new: phases.append(new.phase) if old.phase != new.phase else None)
    return phases


def test_hot_reading_triggers(machine):
    state = machine.on_reading(65.0, now=0.0)
    assert state.phase == NotificationPhase.TRIGGERED
    assert state.is_alert
    assert "65.0" in state.message
    assert state.last_trigger_time == 0.0


def test_triggered_becomes_sent_after_delay(machine):
    machine.on_reading(65.0, now=0.0)
    state = machine.on_reading(65.0, now=2.5)
    assert state.phase == NotificationPhase.SENT
    assert "ops@example.com" in state.sub_message


def test_sent_expires_after_display_time(machine):
    machine.on_reading(65.0, now=0.0)
    machine.advance(2.5)
    assert machine.advance(7.4).phase == NotificationPhase.SENT
    assert machine.advance(7.5).phase == NotificationPhase.IDLE
    assert machine.next_due() is None


def test_drop_below_low_clears_immediately(machine):
    machine.on_reading(65.0, now=0.0)
    state = machine.on_reading(40.0, now=1.0)
    assert state.phase == NotificationPhase.IDLE
    assert machine.pending_events == ()
    assert machine.advance(10.0).phase == NotificationPhase.IDLE


def test_drop_below_low_clears_sent(machine):
    machine.on_reading(65.0, now=0.0)
    machine.on_reading(62.0, now=3.0)
    assert machine.phase == NotificationPhase.SENT
    assert machine.on_reading(50.0, now=4.0).phase == NotificationPhase.IDLE


def test_hysteresis_band_keeps_notification(machine):
    machine.on_reading(65.0, now=0.0)
    assert machine.on_reading(57.0, now=1.0).phase == NotificationPhase.TRIGGERED
    assert machine.on_reading(59.9, now=2.0).phase == NotificationPhase.TRIGGERED


def test_reading_at_threshold_does_not_trigger(machine):
    assert machine.on_reading(60.0, now=0.0).phase == NotificationPhase.IDLE


def test_two_triggers_within_cooldown_give_one_cycle(machine):
    phases = record_phases(machine)
    machine.on_reading(65.0, now=0.0)
    machine.on_reading(65.0, now=10.0)
    machine.on_reading(70.0, now=30.0)
    machine.advance(59.0)
    assert phases.count(NotificationPhase.TRIGGERED) == 1
    assert phases == [NotificationPhase.TRIGGERED, NotificationPhase.SENT, NotificationPhase.IDLE]


def test_cooldown_also_applies_after_hysteresis_clear(machine):
    machine.on_reading(65.0, now=0.0)
    machine.on_reading(40.0, now=1.0)
    assert machine.on_reading(65.0, now=30.0).phase == NotificationPhase.IDLE
    assert machine.on_reading(65.0, now=60.0).phase == NotificationPhase.TRIGGERED


def test_retrigger_from_sent_after_cooldown():
    machine = AlertStateMachine(AlertThresholds(display_s=100.0))
    machine.on_reading(65.0, now=0.0)
    machine.advance(2.5)
    assert machine.phase == NotificationPhase.SENT
    state = machine.on_reading(66.0, now=61.0)
    assert state.phase == NotificationPhase.TRIGGERED
    assert state.last_trigger_time == 61.0
    assert machine.next_due() == pytest.approx(63.5)


def test_due_timers_fire_before_thresholds(machine):
    phases = record_phases(machine)
    machine.on_reading(65.0, now=0.0)
    machine.on_reading(58.0, now=3.0)
    assert phases == [NotificationPhase.TRIGGERED, NotificationPhase.SENT]


def test_reset(machine):
    machine.on_reading(65.0, now=0.0)
    machine.reset()
    assert machine.phase == NotificationPhase.IDLE
    assert machine.next_due() is None
    assert machine.on_reading(65.0, now=1.0).phase == NotificationPhase.TRIGGERED


@pytest.mark.parametrize("kwargs", [
    {"high": 55.0, "low": 55.0},
    {"cooldown_s": -1.0},
    {"sent_delay_s": 0.0},
])
def test_invalid_thresholds(kwargs):
    with pytest.raises(ValueError):
        AlertThresholds(**kwargs)


def test_triggered_is_not_reentered_with_short_cooldown():
    machine = AlertStateMachine(AlertThresholds(cooldown_s=0.0))
    transitions = []
    machine.add_listener(lambda old, new: transitions.append((old.phase, new.phase)))
    for t in (0.0, 1.0, 2.0):
        machine.on_reading(65.0, now=t)
    machine.advance(3.0)
    assert transitions == [
        (NotificationPhase.IDLE, NotificationPhase.TRIGGERED),
        (NotificationPhase.TRIGGERED, NotificationPhase.SENT),
    ]
    assert machine.phase == NotificationPhase.SENT
    assert machine.state.last_trigger_time == 0.0
