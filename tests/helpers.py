"""Shared test helpers for GoodLift."""

from goodlift.timer import machine
from goodlift.timer.engine import EngineState, TimerEngine
from goodlift.timer.machine import Step, TimerConfiguration


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def run_session(config: TimerConfiguration, limit: int = 100_000) -> list[Step]:
    """Tick the pure machine from the first period to completion.

    Returns every step, the initial one included.
    """
    steps = [machine.initial_state(config)]
    while not steps[-1].completed:
        if len(steps) > limit:
            raise AssertionError("session never completed")
        steps.append(machine.tick(config, steps[-1].state))
    return steps


def entered_states(steps: list[Step]):
    """States at the start of each period, in order."""
    return [s.state for s in steps if s.phase_changed]


def tick_until(engine: TimerEngine, predicate, limit: int = 100_000) -> int:
    """Drive ``engine._on_tick`` until *predicate(engine)* holds."""
    for count in range(limit):
        if predicate(engine):
            return count
        engine._on_tick()
    raise AssertionError("condition never reached")


def finish(engine: TimerEngine) -> int:
    """Tick a running engine until it completes."""
    return tick_until(engine, lambda e: e.state == EngineState.COMPLETE)
