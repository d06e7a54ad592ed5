"""Tests for the motor stop debounce timer."""

import threading
import time

import pytest

from spykee_py.core.motor import MotorDebounceTimer


class ManualTimer:
    """Timer replacement that fires only when told to."""

    def __init__(self, delay, function, args=()):
        self.delay = delay
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False

    def start(self):
        self.started = True

    def fire(self):
        self.function(*self.args)


class Recorder:
    def __init__(self):
        self.timers = []
        self.stops = 0

    def factory(self, delay, function, args=()):
        timer = ManualTimer(delay, function, args)
        self.timers.append(timer)
        return timer

    def send_stop(self):
        self.stops += 1


def test_single_arm_stops_once():
    rec = Recorder()
    motor = MotorDebounceTimer(rec.send_stop, timer_factory=rec.factory)
    motor.arm(0.3)
    assert rec.timers[0].started and rec.timers[0].daemon
    assert rec.timers[0].delay == 0.3
    rec.timers[0].fire()
    assert rec.stops == 1
    assert motor.stops_sent == 1
    assert motor.deadline is None


def test_superseded_timer_does_nothing():
    rec = Recorder()
    motor = MotorDebounceTimer(rec.send_stop, timer_factory=rec.factory)
    motor.arm(0.3)
    motor.arm(0.2)
    rec.timers[0].fire()
    assert rec.stops == 0
    rec.timers[1].fire()
    assert rec.stops == 1


def test_deadline_follows_last_arm():
    now = [10.0]
    rec = Recorder()
    motor = MotorDebounceTimer(rec.send_stop, clock=lambda: now[0], timer_factory=rec.factory)
    motor.arm(0.3)
    assert motor.deadline == 10.3
    now[0] = 10.1
    motor.arm(0.3)
    assert abs(motor.deadline - 10.4) < 1e-9


def test_cancel_neutralizes_pending_timer():
    rec = Recorder()
    motor = MotorDebounceTimer(rec.send_stop, timer_factory=rec.factory)
    motor.arm(0.3)
    motor.cancel()
    assert motor.deadline is None
    rec.timers[0].fire()
    assert rec.stops == 0


def test_send_failure_is_logged(caplog):
    def failing_stop():
        raise OSError("socket closed")

    rec = Recorder()
    motor = MotorDebounceTimer(failing_stop, timer_factory=rec.factory)
    motor.arm(0.2)
    rec.timers[0].fire()
    assert "Failed to send motor stop" in caplog.text


def test_burst_of_commands_real_time():
    stops = []
    done = threading.Event()
    start = time.monotonic()

    def send_stop():
        stops.append(time.monotonic() - start)
        done.set()

    motor = MotorDebounceTimer(send_stop)
    motor.arm(0.3)
    time.sleep(0.1)
    motor.arm(0.3)

    assert done.wait(2.0)
    time.sleep(0.3)
    assert len(stops) == 1
    assert 0.38 <= stops[0] < 0.8


def test_timer_cannot_stop_after_newer_move():
    rec = Recorder()
    frames = []
    motor = MotorDebounceTimer(lambda: frames.append("stop"), timer_factory=rec.factory)
    motor.arm(0.3, send=lambda: frames.append("move"))

    def send_move():
        # The first timer fires while the next move is being written
        firing = threading.Thread(target=rec.timers[0].fire)
        firing.start()
        time.sleep(0.05)
        frames.append("move")
        return firing

    firing = []
    motor.arm(0.3, send=lambda: firing.append(send_move()))
    firing[0].join(2.0)

    assert frames == ["move", "move"]
    assert motor.stops_sent == 0
    rec.timers[1].fire()
    assert frames == ["move", "move", "stop"]


def test_cancel_sends_stop_after_disarming():
    rec = Recorder()
    frames = []
    motor = MotorDebounceTimer(lambda: frames.append("timer stop"), timer_factory=rec.factory)
    motor.arm(0.2)
    motor.cancel(send=lambda: frames.append("stop"))
    rec.timers[0].fire()
    assert frames == ["stop"]
    assert motor.deadline is None


def test_failed_move_does_not_arm():
    rec = Recorder()
    motor = MotorDebounceTimer(rec.send_stop, timer_factory=rec.factory)

    def failing_send():
        raise OSError("socket closed")

    with pytest.raises(OSError):
        motor.arm(0.3, send=failing_send)
    assert rec.timers == []
    assert motor.deadline is None
