"""Interval timer state machine (HIIT, yoga flow, cardio).

The machine is a set of pure functions over two immutable objects:

``TimerConfiguration``
    What the user set up.  Rest is always derived from work and ratio.
``TimerRuntimeState``
    Where the session is right now.

Every transition returns a ``Step`` carrying the new state, at most one
audio cue, and whether the phase changed or the session completed.  The
Qt engine owns the clock; this module owns the rules.

HIIT phases
-----------
PREPARATION → WORK → REST → (WORK | RECOVERY | complete)
RECOVERY    → WORK (next set, round 1)

FLOW walks an ordered list of named phases; CARDIO is one countdown.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from ..audio.cues import Cue
from .intervals import (
    EXTENDED_REST_BONUS_SECONDS,
    TIME_COMPARISON_TOLERANCE,
    elapsed_from_position,
    following_extended_rest_time,
    is_extended_rest_time,
    next_extended_rest_time,
    pending_extended_rest_time,
    rest_from_work,
    rounds_for_session,
)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerMode(Enum):
    HIIT = "hiit"
    FLOW = "flow"
    CARDIO = "cardio"


class Phase(Enum):
    PREPARATION = "preparation"
    WORK = "work"
    REST = "rest"
    RECOVERY = "recovery"
    FLOW = "flow"
    CARDIO = "cardio"


# ── configuration ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FlowPhase:
    name: str
    duration_minutes: float

    @property
    def seconds(self) -> int:
        return max(1, int(self.duration_minutes * 60))


DEFAULT_FLOW_PHASES: tuple[FlowPhase, ...] = (
    FlowPhase("Grounding & Warm-Up", 5),
    FlowPhase("Vinyasa", 15),
    FlowPhase("Cool Down", 5),
)

COUNTDOWN_BEEP_SECONDS = (3, 2)

_ENTRY_CUES: dict[Phase, Cue] = {
    Phase.PREPARATION: Cue.TRANSITION_BEEP,
    Phase.WORK: Cue.HIGH_BEEP,
    Phase.REST: Cue.LOW_BEEP,
    Phase.RECOVERY: Cue.TRANSITION_BEEP,
    Phase.FLOW: Cue.CHIME,
    Phase.CARDIO: Cue.HIGH_BEEP,
}


@dataclass(frozen=True)
class TimerConfiguration:
    """Everything needed to run one session.

    Durations are seconds unless the name says minutes.  Setting
    ``extended_rest_interval_minutes`` to 0 turns extended rests off.
    """

    mode: TimerMode = TimerMode.HIIT

    # ── HIIT ──────────────────────────────────────────────────────────
    work_interval: int = 30
    work_rest_ratio: str = "1:1"
    rounds_per_set: int = 8
    number_of_sets: int = 1
    preparation_interval: int = 10
    recovery_between_sets: int = 0
    extended_rest_interval_minutes: float = 8
    extended_rest_bonus: int = EXTENDED_REST_BONUS_SECONDS
    session_length_minutes: float = 10
    warmup_enabled: bool = True
    warmup_minutes: int = 5
    session_name: str = ""
    work_interval_names: tuple[str, ...] = ()
    prep_label: str = "Get Ready"
    recovery_label: str = "Set Break"

    # ── FLOW ──────────────────────────────────────────────────────────
    phases: tuple[FlowPhase, ...] = field(default=DEFAULT_FLOW_PHASES)

    # ── CARDIO ────────────────────────────────────────────────────────
    cardio_minutes: float = 20

    @property
    def rest_interval(self) -> int:
        return rest_from_work(self.work_interval, self.work_rest_ratio)

    @property
    def round_duration(self) -> int:
        return self.work_interval + self.rest_interval

    @property
    def extended_rest_enabled(self) -> bool:
        return self.extended_rest_interval_minutes > 0

    @property
    def cardio_seconds(self) -> int:
        return max(1, int(self.cardio_minutes * 60))

    def with_derived_rounds(self) -> TimerConfiguration:
        """Recompute rounds per set from the session length and warm-up.

        The per-round exercise names are padded or truncated to match.
        """
        rounds = rounds_for_session(
            self.session_length_minutes,
            self.work_interval,
            self.rest_interval,
            self.warmup_enabled,
            self.warmup_minutes,
        )
        names = tuple(self.work_interval_names[:rounds])
        names += ("",) * (rounds - len(names))
        return replace(self, rounds_per_set=rounds, work_interval_names=names)

    def with_warmup(self, enabled: bool, minutes: int | None = None) -> TimerConfiguration:
        """Toggle the warm-up; preparation mirrors its length in seconds."""
        minutes = self.warmup_minutes if minutes is None else max(0, minutes)
        prep = minutes * 60 if enabled else 0
        return replace(
            self,
            warmup_enabled=enabled,
            warmup_minutes=minutes,
            preparation_interval=prep,
        )


# ── runtime state ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerRuntimeState:
    phase: Phase
    remaining: int
    phase_duration: int
    current_set: int = 1
    current_round: int = 1
    phase_index: int = 0
    is_extended_rest: bool = False
    next_extended_rest: float | None = None
    elapsed: int = 0  # active HIIT seconds at the start of this period

    @property
    def is_work(self) -> bool:
        return self.phase is Phase.WORK

    @property
    def is_rest(self) -> bool:
        return self.phase is Phase.REST

    @property
    def is_prep(self) -> bool:
        return self.phase is Phase.PREPARATION

    @property
    def is_recovery(self) -> bool:
        return self.phase is Phase.RECOVERY


@dataclass(frozen=True)
class Step:
    state: TimerRuntimeState
    cue: Cue | None = None
    phase_changed: bool = False
    completed: bool = False


# ══════════════════════════════════════════════════════════════════════════
#  PUBLIC TRANSITIONS
# ══════════════════════════════════════════════════════════════════════════


def initial_state(config: TimerConfiguration) -> Step:
    """First period of a fresh session."""
    if config.mode is TimerMode.HIIT:
        scheduled = _first_extended_rest(config)
        if config.preparation_interval > 0:
            state = TimerRuntimeState(
                phase=Phase.PREPARATION,
                remaining=config.preparation_interval,
                phase_duration=config.preparation_interval,
                next_extended_rest=scheduled,
            )
        else:
            state = _work_state(config, 1, 1, 0, scheduled)
    elif config.mode is TimerMode.FLOW:
        if not config.phases:
            raise ValueError("flow mode needs at least one phase")
        state = _flow_state(config, 0)
    else:
        seconds = config.cardio_seconds
        state = TimerRuntimeState(
            phase=Phase.CARDIO, remaining=seconds, phase_duration=seconds,
        )
    return _entered(state)


def tick(config: TimerConfiguration, state: TimerRuntimeState) -> Step:
    """Advance one second.

    A period of N seconds lasts N ticks: the tick that starts with one
    second left moves to the next period.
    """
    if state.remaining > 1:
        cue = Cue.BEEP if state.remaining in COUNTDOWN_BEEP_SECONDS else None
        return Step(replace(state, remaining=state.remaining - 1), cue=cue)

    if config.mode is TimerMode.HIIT:
        return _advance_hiit(config, state)
    if config.mode is TimerMode.FLOW and state.phase_index < len(config.phases) - 1:
        return _entered(_flow_state(config, state.phase_index + 1))
    return _completed(state)


def skip_forward(config: TimerConfiguration, state: TimerRuntimeState) -> Step:
    """Jump to the start of the next period.

    Counters are rebuilt from the target position, never carried over,
    so they match what ticking would have produced there.  Skipping past
    the final period is a no-op.
    """
    if config.mode is TimerMode.FLOW:
        if state.phase_index >= len(config.phases) - 1:
            return Step(state)
        return Step(_flow_state(config, state.phase_index + 1),
                    cue=Cue.CHIME, phase_changed=True)
    if config.mode is not TimerMode.HIIT:
        return Step(state)

    s, r = state.current_set, state.current_round
    if state.phase is Phase.PREPARATION:
        target = _work_state(config, 1, 1, 0, _first_extended_rest(config))
    elif state.phase is Phase.WORK:
        target = _rest_at(config, s, r)
    elif state.phase is Phase.RECOVERY:
        target = _work_at(config, s + 1, 1)
    elif r < config.rounds_per_set:
        target = _work_at(config, s, r + 1)
    elif s < config.number_of_sets:
        if config.recovery_between_sets > 0:
            target = _recovery_at(config, s)
        else:
            target = _work_at(config, s + 1, 1)
    else:
        return Step(state)
    return Step(target, cue=Cue.TRANSITION_BEEP, phase_changed=True)


def skip_backward(config: TimerConfiguration, state: TimerRuntimeState) -> Step:
    """Jump back to the start of the previous period.

    No-op during preparation and in the very first work period.
    """
    if config.mode is TimerMode.FLOW:
        if state.phase_index <= 0:
            return Step(state)
        return Step(_flow_state(config, state.phase_index - 1),
                    cue=Cue.CHIME, phase_changed=True)
    if config.mode is not TimerMode.HIIT:
        return Step(state)

    s, r = state.current_set, state.current_round
    if state.phase is Phase.WORK and r > 1:
        target = _rest_at(config, s, r - 1)
    elif state.phase is Phase.WORK and s > 1:
        if config.recovery_between_sets > 0:
            target = _recovery_at(config, s - 1)
        else:
            target = _rest_at(config, s - 1, config.rounds_per_set)
    elif state.phase is Phase.REST:
        target = _work_at(config, s, r)
    elif state.phase is Phase.RECOVERY:
        target = _rest_at(config, s, config.rounds_per_set)
    else:
        return Step(state)
    return Step(target, cue=Cue.TRANSITION_BEEP, phase_changed=True)


# ══════════════════════════════════════════════════════════════════════════
#  DISPLAY HELPERS
# ══════════════════════════════════════════════════════════════════════════


def total_session_seconds(config: TimerConfiguration) -> int:
    """Planned session length, not counting extended-rest bonuses."""
    if config.mode is TimerMode.FLOW:
        return sum(phase.seconds for phase in config.phases)
    if config.mode is TimerMode.CARDIO:
        return config.cardio_seconds
    per_set = config.rounds_per_set * config.round_duration
    set_breaks = 0
    if config.number_of_sets > 1 and config.recovery_between_sets > 0:
        set_breaks = (config.number_of_sets - 1) * config.recovery_between_sets
    return config.preparation_interval + config.number_of_sets * per_set + set_breaks


def header_text(config: TimerConfiguration, state: TimerRuntimeState) -> str:
    if config.mode is TimerMode.FLOW:
        if 0 <= state.phase_index < len(config.phases):
            return config.phases[state.phase_index].name
        return "Yoga Session"
    if config.mode is TimerMode.CARDIO:
        return "Cardio Session"
    if state.is_prep:
        return config.prep_label
    if state.is_recovery:
        return f"Set {state.current_set} of {config.number_of_sets} - Break"
    rounds = f"Round {state.current_round} of {config.rounds_per_set}"
    if config.number_of_sets > 1:
        return f"Set {state.current_set} of {config.number_of_sets} - {rounds}"
    return rounds


def work_interval_name(config: TimerConfiguration, state: TimerRuntimeState) -> str:
    """Exercise name for the current round, or ``""`` when unnamed."""
    index = state.current_round - 1
    if 0 <= index < len(config.work_interval_names):
        return config.work_interval_names[index]
    return ""


# ══════════════════════════════════════════════════════════════════════════
#  INTERNAL
# ══════════════════════════════════════════════════════════════════════════


def _advance_hiit(config: TimerConfiguration, state: TimerRuntimeState) -> Step:
    s, r = state.current_set, state.current_round
    scheduled = state.next_extended_rest

    if state.phase is Phase.PREPARATION:
        return _entered(_work_state(config, 1, 1, state.elapsed, scheduled))
    if state.phase is Phase.RECOVERY:
        return _entered(_work_state(config, s + 1, 1, state.elapsed, scheduled))
    if state.phase is Phase.WORK:
        elapsed = state.elapsed + config.work_interval
        return _entered(_rest_state(config, s, r, elapsed, scheduled))

    # end of rest: base rest is active time, the bonus is not
    elapsed = state.elapsed + config.rest_interval
    if r < config.rounds_per_set:
        return _entered(_work_state(config, s, r + 1, elapsed, scheduled))
    if s < config.number_of_sets:
        if config.recovery_between_sets > 0:
            return _entered(_recovery_state(config, s, elapsed, scheduled))
        return _entered(_work_state(config, s + 1, 1, elapsed, scheduled))
    return _completed(state)


def _entered(state: TimerRuntimeState) -> Step:
    return Step(state, cue=_ENTRY_CUES[state.phase], phase_changed=True)


def _completed(state: TimerRuntimeState) -> Step:
    return Step(
        replace(state, remaining=0),
        cue=Cue.COMPLETION_FANFARE,
        completed=True,
    )


def _first_extended_rest(config: TimerConfiguration) -> float | None:
    if not config.extended_rest_enabled:
        return None
    return next_extended_rest_time(
        0,
        config.extended_rest_interval_minutes,
        config.work_interval,
        config.rest_interval,
    )


def _pending_extended_rest(config: TimerConfiguration, elapsed: float) -> float | None:
    if not config.extended_rest_enabled:
        return None
    return pending_extended_rest_time(
        elapsed,
        config.extended_rest_interval_minutes,
        config.work_interval,
        config.rest_interval,
    )


def _work_state(
    config: TimerConfiguration,
    set_index: int,
    round_index: int,
    elapsed: int,
    scheduled: float | None,
) -> TimerRuntimeState:
    return TimerRuntimeState(
        phase=Phase.WORK,
        remaining=config.work_interval,
        phase_duration=config.work_interval,
        current_set=set_index,
        current_round=round_index,
        next_extended_rest=scheduled,
        elapsed=elapsed,
    )


def _rest_state(
    config: TimerConfiguration,
    set_index: int,
    round_index: int,
    elapsed: int,
    scheduled: float | None,
) -> TimerRuntimeState:
    if scheduled is not None and scheduled < elapsed - TIME_COMPARISON_TOLERANCE:
        scheduled = _pending_extended_rest(config, elapsed)

    extended = is_extended_rest_time(elapsed, scheduled)
    duration = config.rest_interval
    if extended:
        duration += config.extended_rest_bonus
        scheduled = following_extended_rest_time(
            elapsed,
            config.extended_rest_interval_minutes,
            config.work_interval,
            config.rest_interval,
        )

    return TimerRuntimeState(
        phase=Phase.REST,
        remaining=duration,
        phase_duration=duration,
        current_set=set_index,
        current_round=round_index,
        is_extended_rest=extended,
        next_extended_rest=scheduled,
        elapsed=elapsed,
    )


def _recovery_state(
    config: TimerConfiguration,
    set_index: int,
    elapsed: int,
    scheduled: float | None,
) -> TimerRuntimeState:
    return TimerRuntimeState(
        phase=Phase.RECOVERY,
        remaining=config.recovery_between_sets,
        phase_duration=config.recovery_between_sets,
        current_set=set_index,
        current_round=config.rounds_per_set,
        next_extended_rest=scheduled,
        elapsed=elapsed,
    )


def _flow_state(config: TimerConfiguration, index: int) -> TimerRuntimeState:
    seconds = config.phases[index].seconds
    return TimerRuntimeState(
        phase=Phase.FLOW,
        remaining=seconds,
        phase_duration=seconds,
        phase_index=index,
    )


# ── positional builders used by skips ─────────────────────────────────────


def _position(config: TimerConfiguration, set_index: int, round_index: int, is_work: bool) -> int:
    return elapsed_from_position(
        set_index,
        round_index,
        is_work,
        config.rounds_per_set,
        config.work_interval,
        config.rest_interval,
    )


def _work_at(config: TimerConfiguration, set_index: int, round_index: int) -> TimerRuntimeState:
    elapsed = _position(config, set_index, round_index, True)
    return _work_state(
        config, set_index, round_index, elapsed,
        _pending_extended_rest(config, elapsed),
    )


def _rest_at(config: TimerConfiguration, set_index: int, round_index: int) -> TimerRuntimeState:
    elapsed = _position(config, set_index, round_index, False)
    return _rest_state(
        config, set_index, round_index, elapsed,
        _pending_extended_rest(config, elapsed),
    )


def _recovery_at(config: TimerConfiguration, set_index: int) -> TimerRuntimeState:
    # a set break sits at the end of the set's active time
    elapsed = _position(config, set_index + 1, 1, True)
    return _recovery_state(
        config, set_index, elapsed,
        _pending_extended_rest(config, elapsed),
    )
