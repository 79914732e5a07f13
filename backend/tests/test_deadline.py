"""Tests for the request deadline"""
import pytest

from app.exceptions import RequestTimedOut
from app.utils.deadline import Deadline


class FakeClock:
    def __init__(self):
        self.now = 100.0
    
    def __call__(self):
        return self.now


def test_remaining_counts_down():
    clock = FakeClock()
    deadline = Deadline(10, clock=clock)
    
    clock.now += 4
    
    assert deadline.remaining() == pytest.approx(6)
    deadline.check("step")


def test_expired_deadline_raises():
    clock = FakeClock()
    deadline = Deadline(1, clock=clock)
    
    clock.now += 2
    
    assert deadline.remaining() == 0
    with pytest.raises(RequestTimedOut):
        deadline.check("step")


def test_unbounded():
    deadline = Deadline.unbounded()
    
    assert deadline.remaining() is None
    assert not deadline.expired
    deadline.check("step")
