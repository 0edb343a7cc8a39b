from __future__ import annotations

import pytest

from core.templates import SensorTemplate, compile_templates


class FakeClock:
    """Monotonic clock that only advances when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def make_templates(*specs):
    """specs: (pattern, name) tuples -> compiled templates."""
    return compile_templates(SensorTemplate(pattern=p, name=n) for p, n in specs)
