"""GoodLift interval timer: HIIT, yoga-flow and cardio countdowns."""

__version__ = "0.1.0"
