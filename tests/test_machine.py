"""Tests for the pure timer state machine.

Covers: initial periods, tick countdown and cue discipline, HIIT round
and set flow, extended rests, recovery between sets, flow and cardio
modes, skip consistency with continuous ticking, and display helpers.
"""

from dataclasses import replace

import pytest

from goodlift.audio.cues import Cue
from goodlift.timer import machine
from goodlift.timer.intervals import elapsed_from_position, following_extended_rest_time
from goodlift.timer.machine import (
    FlowPhase,
    Phase,
    TimerConfiguration,
    TimerMode,
    TimerRuntimeState,
    header_text,
    initial_state,
    skip_backward,
    skip_forward,
    tick,
    total_session_seconds,
    work_interval_name,
)

from helpers import entered_states, run_session


@pytest.fixture
def two_sets():
    """2 sets × 3 rounds of 20/20, 30 s break between sets, no extras."""
    return TimerConfiguration(
        work_interval=20,
        work_rest_ratio="1:1",
        rounds_per_set=3,
        number_of_sets=2,
        preparation_interval=0,
        recovery_between_sets=30,
        extended_rest_interval_minutes=0,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


class TestConfiguration:

    def test_rest_is_derived_from_work_and_ratio(self):
        config = TimerConfiguration(work_interval=45, work_rest_ratio="3:2")
        assert config.rest_interval == 30
        assert replace(config, work_interval=60).rest_interval == 40

    def test_derived_rounds_resizes_names(self):
        config = TimerConfiguration(
            work_interval=30, work_rest_ratio="1:1",
            session_length_minutes=10, warmup_enabled=True, warmup_minutes=5,
            work_interval_names=("Burpees",),
        ).with_derived_rounds()
        assert config.rounds_per_set == 5
        assert config.work_interval_names == ("Burpees", "", "", "", "")

    def test_with_warmup_sets_preparation(self):
        config = TimerConfiguration().with_warmup(True, 2)
        assert config.preparation_interval == 120
        assert config.with_warmup(False).preparation_interval == 0

    def test_extended_rest_can_be_disabled(self):
        config = TimerConfiguration(extended_rest_interval_minutes=0)
        assert not config.extended_rest_enabled
        assert initial_state(config).state.next_extended_rest is None


# ═══════════════════════════════════════════════════════════════════════════
#  INITIAL STATE
# ═══════════════════════════════════════════════════════════════════════════


class TestInitialState:

    def test_hiit_starts_with_preparation(self, hiit_config):
        step = initial_state(hiit_config)
        assert step.state.phase == Phase.PREPARATION
        assert step.state.remaining == 10
        assert step.state.next_extended_rest == 210
        assert step.phase_changed
        assert step.cue == Cue.TRANSITION_BEEP

    def test_hiit_without_prep_starts_working(self, hiit_config):
        step = initial_state(replace(hiit_config, preparation_interval=0))
        assert step.state.phase == Phase.WORK
        assert step.state.remaining == 30
        assert step.cue == Cue.HIGH_BEEP

    def test_flow_starts_first_phase(self):
        step = initial_state(TimerConfiguration(mode=TimerMode.FLOW))
        assert step.state.phase == Phase.FLOW
        assert step.state.phase_index == 0
        assert step.state.remaining == 5 * 60
        assert step.cue == Cue.CHIME

    def test_flow_without_phases_raises(self):
        with pytest.raises(ValueError):
            initial_state(TimerConfiguration(mode=TimerMode.FLOW, phases=()))

    def test_cardio_single_countdown(self):
        step = initial_state(TimerConfiguration(mode=TimerMode.CARDIO, cardio_minutes=20))
        assert step.state.phase == Phase.CARDIO
        assert step.state.remaining == 1200


# ═══════════════════════════════════════════════════════════════════════════
#  TICK
# ═══════════════════════════════════════════════════════════════════════════


class TestTick:

    def test_tick_decrements(self, hiit_config):
        state = initial_state(hiit_config).state
        step = tick(hiit_config, state)
        assert step.state.remaining == 9
        assert not step.phase_changed
        assert step.cue is None

    def test_countdown_beeps_then_one_transition_cue(self, hiit_config):
        config = replace(hiit_config, preparation_interval=0)
        state = initial_state(config).state
        cues = []
        for _ in range(30):
            step = tick(config, state)
            cues.append(step.cue)
            state = step.state
        # 30 ticks: remaining 30→1, then the transition
        assert cues[:27] == [None] * 27
        assert cues[27:29] == [Cue.BEEP, Cue.BEEP]
        assert cues[29] == Cue.LOW_BEEP
        assert state.phase == Phase.REST

    def test_period_of_n_seconds_lasts_n_ticks(self, hiit_config):
        state = initial_state(hiit_config).state
        for count in range(1, 100):
            step = tick(hiit_config, state)
            state = step.state
            if step.phase_changed:
                break
        assert count == 10
        assert state.phase == Phase.WORK

    def test_remaining_non_negative_and_flags_exclusive(self, hiit_config):
        config = replace(hiit_config, number_of_sets=2, recovery_between_sets=15)
        for step in run_session(config):
            s = step.state
            assert isinstance(s.remaining, int)
            assert s.remaining >= 0
            assert sum((s.is_work, s.is_prep, s.is_recovery, s.is_rest)) <= 1

    def test_at_most_one_cue_per_tick(self, hiit_config):
        steps = run_session(hiit_config)
        for step in steps:
            assert step.cue is None or isinstance(step.cue, Cue)
        # every period change carries exactly its entry cue
        assert all(s.cue is not None for s in steps if s.phase_changed)


# ═══════════════════════════════════════════════════════════════════════════
#  HIIT FLOW
# ═══════════════════════════════════════════════════════════════════════════


class TestHiitSession:

    def test_end_to_end_extended_rest(self, hiit_config):
        """30/30 × 4, extended rest every 4 min with a 60 s bonus."""
        steps = run_session(hiit_config)
        rests = [s for s in entered_states(steps) if s.phase == Phase.REST]

        assert [r.current_round for r in rests] == [1, 2, 3, 4]
        assert [r.is_extended_rest for r in rests] == [False, False, False, True]
        assert [r.remaining for r in rests] == [30, 30, 30, 90]
        assert rests[3].elapsed == 210
        # active time: 4 × (30 + 30)
        assert rests[3].elapsed + hiit_config.rest_interval == 240
        # 10 prep + 4 × 60 + 60 bonus
        assert len(steps) - 1 == 310
        assert steps[-1].completed
        assert steps[-1].cue == Cue.COMPLETION_FANFARE

    def test_bonus_applied_once_per_rest(self, hiit_config):
        steps = run_session(hiit_config)
        extended = [s for s in entered_states(steps) if s.is_extended_rest]
        assert len(extended) == 1
        # the bonus rest counts down from 90 without being extended again
        in_rest = [
            s.state for s in steps
            if s.state.phase == Phase.REST and s.state.current_round == 4
        ]
        assert max(s.remaining for s in in_rest) == 90

    def test_next_extended_recomputed_after_bonus(self, hiit_config):
        steps = run_session(hiit_config)
        rest4 = [s for s in entered_states(steps) if s.is_extended_rest][0]
        assert rest4.next_extended_rest == following_extended_rest_time(210, 4, 30, 30)

    def test_elapsed_always_matches_position(self, hiit_config):
        config = replace(hiit_config, number_of_sets=3, recovery_between_sets=20)
        for s in entered_states(run_session(config)):
            if s.phase in (Phase.WORK, Phase.REST):
                assert s.elapsed == elapsed_from_position(
                    s.current_set, s.current_round, s.is_work,
                    config.rounds_per_set, config.work_interval, config.rest_interval,
                )

    def test_completion_after_one_recovery(self, two_sets):
        steps = run_session(two_sets)
        phases = [s.phase for s in entered_states(steps)]

        assert phases.count(Phase.RECOVERY) == 1
        assert phases.count(Phase.WORK) == 6
        assert phases.count(Phase.REST) == 6
        last = steps[-1].state
        assert (last.current_set, last.current_round) == (2, 3)
        # 2 × 3 × 40 + one 30 s break
        assert len(steps) - 1 == 270

    def test_recovery_holds_round_and_set(self, two_sets):
        recovery = [
            s for s in entered_states(run_session(two_sets))
            if s.phase == Phase.RECOVERY
        ][0]
        assert recovery.current_set == 1
        assert recovery.current_round == 3
        assert recovery.remaining == 30

    def test_recovery_then_next_set(self, two_sets):
        states = entered_states(run_session(two_sets))
        idx = [s.phase for s in states].index(Phase.RECOVERY)
        after = states[idx + 1]
        assert after.phase == Phase.WORK
        assert (after.current_set, after.current_round) == (2, 1)

    def test_no_recovery_goes_straight_to_next_set(self, two_sets):
        config = replace(two_sets, recovery_between_sets=0)
        steps = run_session(config)
        assert Phase.RECOVERY not in [s.phase for s in entered_states(steps)]
        assert len(steps) - 1 == 240

    def test_recovery_cue(self, two_sets):
        steps = run_session(two_sets)
        cues = [s.cue for s in steps if s.phase_changed and s.state.is_recovery]
        assert cues == [Cue.TRANSITION_BEEP]


# ═══════════════════════════════════════════════════════════════════════════
#  FLOW / CARDIO
# ═══════════════════════════════════════════════════════════════════════════


class TestFlowAndCardio:

    def test_flow_sequence(self):
        config = TimerConfiguration(
            mode=TimerMode.FLOW,
            phases=(
                FlowPhase("Warmup", 5),
                FlowPhase("Vinyasa", 15),
                FlowPhase("CoolDown", 5),
            ),
        )
        steps = run_session(config)
        changes = [s for s in steps if s.phase_changed]

        assert len(steps) - 1 == 25 * 60
        assert [s.state.phase_index for s in changes] == [0, 1, 2]
        assert [s.cue for s in changes] == [Cue.CHIME] * 3
        assert sum(1 for s in steps if s.cue == Cue.CHIME) == 3
        assert sum(1 for s in steps if s.cue == Cue.COMPLETION_FANFARE) == 1

    def test_cardio_counts_down_once(self):
        config = TimerConfiguration(mode=TimerMode.CARDIO, cardio_minutes=2)
        steps = run_session(config)
        assert len(steps) - 1 == 120
        assert sum(1 for s in steps if s.phase_changed) == 1
        assert steps[-1].completed


# ═══════════════════════════════════════════════════════════════════════════
#  SKIPS
# ═══════════════════════════════════════════════════════════════════════════


def _position(state: TimerRuntimeState):
    return (
        state.phase,
        state.current_round,
        state.current_set,
        state.elapsed,
        state.is_extended_rest,
        state.next_extended_rest,
    )


class TestSkips:

    def test_forward_then_back_from_mid_round(self):
        config = TimerConfiguration(
            work_interval=30,
            work_rest_ratio="2:1",   # rest 15
            rounds_per_set=8,
            number_of_sets=1,
            preparation_interval=10,
        )
        steps = run_session(config)
        start = next(
            s.state for s in steps
            if s.state.is_work and s.state.current_round == 3
            and s.state.remaining == 20
        )

        forward = skip_forward(config, start)
        assert forward.state.phase == Phase.REST
        assert forward.state.elapsed == 120
        back = skip_backward(config, forward.state)

        assert _position(back.state) == _position(start)
        assert back.state.remaining == config.work_interval

    def test_skip_forward_matches_ticking(self, hiit_config):
        config = replace(hiit_config, number_of_sets=2, recovery_between_sets=20)
        states = entered_states(run_session(config))
        for prev, nxt in zip(states, states[1:]):
            assert skip_forward(config, prev).state == nxt

    def test_skip_backward_matches_ticking(self, hiit_config):
        config = replace(hiit_config, number_of_sets=2, recovery_between_sets=20)
        states = entered_states(run_session(config))
        for prev, nxt in zip(states, states[1:]):
            if prev.is_prep:
                continue
            assert skip_backward(config, nxt).state == prev

    def test_skip_backward_without_recovery(self, hiit_config):
        config = replace(hiit_config, number_of_sets=2, recovery_between_sets=0)
        states = entered_states(run_session(config))
        for prev, nxt in zip(states, states[1:]):
            if prev.is_prep:
                continue
            assert skip_backward(config, nxt).state == prev

    def test_skip_into_extended_rest(self, hiit_config):
        states = entered_states(run_session(hiit_config))
        work4 = next(s for s in states if s.is_work and s.current_round == 4)
        step = skip_forward(hiit_config, work4)
        assert step.state.is_extended_rest
        assert step.state.remaining == 90

    def test_skip_cues(self, hiit_config):
        state = initial_state(hiit_config).state
        step = skip_forward(hiit_config, state)
        assert step.cue == Cue.TRANSITION_BEEP
        assert step.state.phase == Phase.WORK
        assert step.state.elapsed == 0

    def test_skip_noops(self, hiit_config):
        prep = initial_state(hiit_config).state
        assert skip_backward(hiit_config, prep).state == prep
        assert skip_backward(hiit_config, prep).cue is None

        first_work = skip_forward(hiit_config, prep).state
        assert skip_backward(hiit_config, first_work).state == first_work

        last_rest = [
            s for s in entered_states(run_session(hiit_config)) if s.is_rest
        ][-1]
        step = skip_forward(hiit_config, last_rest)
        assert step.state == last_rest
        assert not step.phase_changed

    def test_flow_skips(self):
        config = TimerConfiguration(mode=TimerMode.FLOW)
        first = initial_state(config).state
        assert skip_backward(config, first).state == first

        second = skip_forward(config, first)
        assert second.state.phase_index == 1
        assert second.state.remaining == 15 * 60
        assert second.cue == Cue.CHIME

        last = skip_forward(config, second.state).state
        assert skip_forward(config, last).state == last
        assert skip_backward(config, last).state.phase_index == 1

    def test_cardio_skips_are_noops(self):
        config = TimerConfiguration(mode=TimerMode.CARDIO)
        state = initial_state(config).state
        assert skip_forward(config, state).state == state
        assert skip_backward(config, state).state == state


# ═══════════════════════════════════════════════════════════════════════════
#  DISPLAY HELPERS
# ═══════════════════════════════════════════════════════════════════════════


class TestDisplayHelpers:

    def test_total_session_seconds(self, hiit_config, two_sets):
        assert total_session_seconds(hiit_config) == 10 + 4 * 60
        assert total_session_seconds(two_sets) == 2 * 3 * 40 + 30
        assert total_session_seconds(TimerConfiguration(mode=TimerMode.FLOW)) == 1500
        assert total_session_seconds(
            TimerConfiguration(mode=TimerMode.CARDIO, cardio_minutes=20)
        ) == 1200

    def test_header_text(self, hiit_config, two_sets):
        prep = initial_state(hiit_config).state
        assert header_text(hiit_config, prep) == "Get Ready"

        work = skip_forward(hiit_config, prep).state
        assert header_text(hiit_config, work) == "Round 1 of 4"

        states = entered_states(run_session(two_sets))
        recovery = next(s for s in states if s.is_recovery)
        assert header_text(two_sets, recovery) == "Set 1 of 2 - Break"
        assert header_text(two_sets, states[0]) == "Set 1 of 2 - Round 1 of 3"

        flow = TimerConfiguration(mode=TimerMode.FLOW)
        assert header_text(flow, initial_state(flow).state) == "Grounding & Warm-Up"
        cardio = TimerConfiguration(mode=TimerMode.CARDIO)
        assert header_text(cardio, initial_state(cardio).state) == "Cardio Session"

    def test_work_interval_name(self, hiit_config):
        config = replace(hiit_config, work_interval_names=("Burpees", "Squats"))
        prep = initial_state(config).state
        work = machine.skip_forward(config, prep).state
        assert work_interval_name(config, work) == "Burpees"
        later = replace(work, current_round=4)
        assert work_interval_name(config, later) == ""
