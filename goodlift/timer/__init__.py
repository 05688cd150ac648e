"""Timer package.

``TimerEngine`` lives in :mod:`goodlift.timer.engine` and is not
re-exported here: it depends on presets and storage, which in turn
import the machine types below.
"""

from .intervals import (
    EXTENDED_REST_BONUS_SECONDS,
    TIME_COMPARISON_TOLERANCE,
    SUPPORTED_RATIOS,
    rest_from_work,
    rounds_for_session,
    next_extended_rest_time,
    elapsed_from_position,
    format_time,
)
from .machine import (
    TimerMode,
    Phase,
    FlowPhase,
    TimerConfiguration,
    TimerRuntimeState,
    Step,
    DEFAULT_FLOW_PHASES,
)

__all__ = [
    "EXTENDED_REST_BONUS_SECONDS",
    "TIME_COMPARISON_TOLERANCE",
    "SUPPORTED_RATIOS",
    "rest_from_work",
    "rounds_for_session",
    "next_extended_rest_time",
    "elapsed_from_position",
    "format_time",
    "TimerMode",
    "Phase",
    "FlowPhase",
    "TimerConfiguration",
    "TimerRuntimeState",
    "Step",
    "DEFAULT_FLOW_PHASES",
]
