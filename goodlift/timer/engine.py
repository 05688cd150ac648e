"""Qt driver for the interval timer.

States
------
IDLE      Configuring; no session in progress.
RUNNING   Ticking once per second.
PAUSED    Frozen; counters untouched.
COMPLETE  Last period finished; waiting for the session to be logged.

Transitions
-----------
IDLE | COMPLETE → RUNNING   (start)
RUNNING → PAUSED            (pause)
PAUSED → RUNNING            (resume)
RUNNING → COMPLETE          (last period reaches 0)
Any → IDLE                  (stop / reset / mode change)

The phase rules live in :mod:`goodlift.timer.machine`; this class only
owns the ``QTimer``, the signals and the calls out to storage.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Iterable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..presets import Preset
from ..sessions import CompletedSession, session_type_for
from ..storage.base import StorageError, TimerStore
from . import machine
from .intervals import parse_ratio
from .machine import (
    FlowPhase,
    Phase,
    Step,
    TimerConfiguration,
    TimerMode,
    TimerRuntimeState,
)

logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"


TICK_INTERVAL_MS = 1000


class TimerEngine(QObject):
    """One interval-timer session at a time.

    Signals
    -------
    tick(remaining_seconds: int)
        After every tick and every skip.
    state_changed(new_state: EngineState)
    phase_changed(phase: Phase)
        When a new period starts (including the first one).
    cue(cue: Cue)
        At most once per tick.  Connect to ``SoundManager.play``.
    session_completed(data: dict)
        Keys: ``mode``, ``session_type``, ``duration_seconds``,
        ``active_seconds``, ``start_time``, ``end_time``.
    presets_changed(presets: list[Preset])
    persistence_failed(message: str)
        A store call failed.  Timer state is left as it was.
    """

    tick = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    phase_changed = pyqtSignal(object)
    cue = pyqtSignal(object)
    session_completed = pyqtSignal(object)
    presets_changed = pyqtSignal(object)
    persistence_failed = pyqtSignal(str)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        config: TimerConfiguration | None = None,
        store: TimerStore | None = None,
        sounds=None,
    ) -> None:
        super().__init__(parent)

        self._config: TimerConfiguration = config or TimerConfiguration()
        self._store: TimerStore | None = store

        # ── session state ─────────────────────────────────────────────
        self._state: EngineState = EngineState.IDLE
        self._runtime: TimerRuntimeState | None = None
        self._seconds_run: int = 0
        self._start_time: datetime | None = None
        self._end_time: datetime | None = None

        self._presets: list[Preset] = []

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

        if sounds is not None:
            self.cue.connect(sounds.play)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def config(self) -> TimerConfiguration:
        return self._config

    @property
    def mode(self) -> TimerMode:
        return self._config.mode

    @property
    def runtime(self) -> TimerRuntimeState | None:
        """Live position, or ``None`` while configuring."""
        return self._runtime

    @property
    def phase(self) -> Phase | None:
        return self._runtime.phase if self._runtime else None

    @property
    def remaining(self) -> int:
        """Seconds left in the current period.

        While configuring this is the length of the first period.
        """
        if self._runtime is not None:
            return self._runtime.remaining
        return machine.initial_state(self._config).state.remaining

    @property
    def total_time(self) -> int:
        return machine.total_session_seconds(self._config)

    @property
    def seconds_run(self) -> int:
        return self._seconds_run

    @property
    def percent_complete(self) -> float:
        total = self.total_time
        if total <= 0:
            return 0.0
        return max(0.0, min(1.0, self._seconds_run / total))

    @property
    def header_text(self) -> str:
        if self._runtime is None:
            return ""
        return machine.header_text(self._config, self._runtime)

    @property
    def work_interval_name(self) -> str:
        if self._runtime is None or not self._runtime.is_work:
            return ""
        return machine.work_interval_name(self._config, self._runtime)

    @property
    def is_running(self) -> bool:
        return self._state == EngineState.RUNNING

    @property
    def is_active(self) -> bool:
        """True while a session is running or paused."""
        return self._state in (EngineState.RUNNING, EngineState.PAUSED)

    @property
    def presets(self) -> list[Preset]:
        return list(self._presets)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Begin a session, or resume one that is paused."""
        if self._state == EngineState.PAUSED:
            self.resume()
            return
        if self._state == EngineState.RUNNING:
            return

        step = machine.initial_state(self._config)
        self._seconds_run = 0
        self._start_time = datetime.now()
        self._end_time = None
        logger.info(
            "Starting %s session (%d s planned)",
            self._config.mode.value, self.total_time,
        )
        self._set_state(EngineState.RUNNING)
        self._apply(step)
        self._qt_timer.start()

    def pause(self) -> None:
        if self._state != EngineState.RUNNING:
            return
        self._qt_timer.stop()
        self._set_state(EngineState.PAUSED)

    def resume(self) -> None:
        if self._state != EngineState.PAUSED:
            return
        self._set_state(EngineState.RUNNING)
        self._qt_timer.start()

    def toggle_pause(self) -> None:
        if self._state == EngineState.PAUSED:
            self.resume()
        else:
            self.pause()

    def stop(self) -> None:
        """Halt immediately and drop the in-progress session."""
        self._qt_timer.stop()
        self._runtime = None
        self._start_time = None
        self._end_time = None
        self._set_state(EngineState.IDLE)

    def reset(self) -> None:
        """Stop and clear every counter, including the completed summary."""
        self.stop()
        self._seconds_run = 0

    def skip_forward(self) -> None:
        if not self.is_active or self._runtime is None:
            return
        self._apply(machine.skip_forward(self._config, self._runtime))

    def skip_backward(self) -> None:
        if not self.is_active or self._runtime is None:
            return
        self._apply(machine.skip_backward(self._config, self._runtime))

    # ══════════════════════════════════════════════════════════════════
    #  CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    def configure(self, config: TimerConfiguration) -> bool:
        """Replace the whole configuration.  Ignored mid-session."""
        if self.is_active:
            logger.debug("Ignoring configuration change during a session")
            return False
        if config.mode != self._config.mode:
            self.reset()
        self._config = config
        return True

    def set_mode(self, mode: TimerMode) -> None:
        """Switch mode; any session in progress is discarded."""
        if mode == self._config.mode:
            return
        self.reset()
        self._config = replace(self._config, mode=mode)

    def set_work_interval(self, seconds: int) -> bool:
        config = replace(self._config, work_interval=max(1, int(seconds)))
        return self.configure(config.with_derived_rounds())

    def set_work_rest_ratio(self, ratio: str) -> bool:
        parse_ratio(ratio)
        config = replace(self._config, work_rest_ratio=ratio)
        return self.configure(config.with_derived_rounds())

    def set_rounds_per_set(self, rounds: int) -> bool:
        return self.configure(replace(self._config, rounds_per_set=max(1, int(rounds))))

    def set_number_of_sets(self, sets: int) -> bool:
        return self.configure(replace(self._config, number_of_sets=max(1, int(sets))))

    def set_preparation_interval(self, seconds: int) -> bool:
        return self.configure(
            replace(self._config, preparation_interval=max(0, int(seconds)))
        )

    def set_recovery_between_sets(self, seconds: int) -> bool:
        return self.configure(
            replace(self._config, recovery_between_sets=max(0, int(seconds)))
        )

    def set_extended_rest_interval(self, minutes: float) -> bool:
        return self.configure(
            replace(self._config, extended_rest_interval_minutes=max(0, minutes))
        )

    def set_extended_rest_bonus(self, seconds: int) -> bool:
        return self.configure(
            replace(self._config, extended_rest_bonus=max(0, int(seconds)))
        )

    def set_session_length(self, minutes: float) -> bool:
        config = replace(self._config, session_length_minutes=max(1, minutes))
        return self.configure(config.with_derived_rounds())

    def set_warmup(self, enabled: bool, minutes: int | None = None) -> bool:
        config = self._config.with_warmup(enabled, minutes)
        return self.configure(config.with_derived_rounds())

    def set_work_interval_names(self, names: Iterable[str]) -> bool:
        return self.configure(
            replace(self._config, work_interval_names=tuple(names))
        )

    def set_flow_phases(self, phases: Iterable[FlowPhase]) -> bool:
        phases = tuple(phases)
        if not phases:
            raise ValueError("flow mode needs at least one phase")
        return self.configure(replace(self._config, phases=phases))

    def set_flow_phase_duration(self, index: int, minutes: float) -> bool:
        phases = list(self._config.phases)
        phases[index] = replace(phases[index], duration_minutes=max(1, minutes))
        return self.configure(replace(self._config, phases=tuple(phases)))

    def set_cardio_duration(self, minutes: float) -> bool:
        return self.configure(replace(self._config, cardio_minutes=max(1, minutes)))

    # ══════════════════════════════════════════════════════════════════
    #  PRESETS & SESSION LOG
    # ══════════════════════════════════════════════════════════════════

    def refresh_presets(self) -> list[Preset]:
        """Reload presets for the current mode from the store."""
        if self._config.mode == TimerMode.CARDIO:
            presets: list[Preset] = []
        else:
            try:
                presets = self._require_store().load_presets(self._config.mode)
            except StorageError as exc:
                self._report_failure("Failed to load presets", exc)
                return self.presets
        self._presets = presets
        self.presets_changed.emit(list(presets))
        return list(presets)

    def save_preset(self, name: str, preset_id: str | None = None) -> Preset | None:
        """Snapshot the current configuration under *name*.

        Passing the id of an existing preset replaces it.
        """
        name = name.strip()
        if not name:
            raise ValueError("preset name must not be empty")
        preset = Preset.from_configuration(name, self._config, preset_id=preset_id)
        try:
            saved = self._require_store().save_preset(preset)
        except StorageError as exc:
            self._report_failure("Failed to save preset", exc)
            return None
        logger.info("Saved %s preset %r (%s)", saved.mode.value, saved.name, saved.id)
        self.refresh_presets()
        return saved

    def load_preset(self, preset: Preset) -> bool:
        return self.configure(preset.apply(self._config))

    def delete_preset(self, preset_id: str) -> bool:
        try:
            self._require_store().delete_preset(preset_id)
        except StorageError as exc:
            self._report_failure("Failed to delete preset", exc)
            return False
        self.refresh_presets()
        return True

    def log_session(
        self,
        perceived_effort: int | None = None,
        notes: str = "",
    ) -> CompletedSession | None:
        """Write the finished session to the store and update stats.

        Only a completed session can be logged, and only once.  On failure
        nothing is reset, so the caller can simply retry.
        """
        if self._state != EngineState.COMPLETE:
            logger.debug("No completed session to log (state %s)", self._state.value)
            return None
        session = CompletedSession(
            date=self._end_time or datetime.now(),
            type=session_type_for(self._config.mode),
            duration=self.total_time // 60,
            perceived_effort=perceived_effort,
            notes=notes or None,
        )
        try:
            store = self._require_store()
            store.save_completed_session(session)
            stats = store.get_user_stats()
            store.save_user_stats(stats.record(session, self.total_time))
        except StorageError as exc:
            self._report_failure("Failed to save session", exc)
            return None
        logger.info("Logged %s session (%d min)", session.type, session.duration)
        self.reset()
        return session

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if self._state != EngineState.RUNNING or self._runtime is None:
            return
        self._seconds_run += 1
        self._apply(machine.tick(self._config, self._runtime))

    def _apply(self, step: Step) -> None:
        self._runtime = step.state
        if step.cue is not None:
            self.cue.emit(step.cue)
        self.tick.emit(step.state.remaining)
        if step.phase_changed:
            logger.debug(
                "Phase %s (set %d, round %d, %d s%s)",
                step.state.phase.value,
                step.state.current_set,
                step.state.current_round,
                step.state.remaining,
                ", extended" if step.state.is_extended_rest else "",
            )
            self.phase_changed.emit(step.state.phase)
        if step.completed:
            self._finish_session()

    def _finish_session(self) -> None:
        self._qt_timer.stop()
        self._end_time = datetime.now()
        self._set_state(EngineState.COMPLETE)
        logger.info("Completed %s session", self._config.mode.value)
        self.session_completed.emit({
            "mode": self._config.mode,
            "session_type": session_type_for(self._config.mode),
            "duration_seconds": self.total_time,
            "active_seconds": self._seconds_run,
            "start_time": self._start_time,
            "end_time": self._end_time,
        })

    def _set_state(self, new_state: EngineState) -> None:
        self._state = new_state
        self.state_changed.emit(new_state)

    def _require_store(self) -> TimerStore:
        if self._store is None:
            raise StorageError("no storage configured")
        return self._store

    def _report_failure(self, message: str, exc: Exception) -> None:
        logger.error("%s: %s", message, exc)
        self.persistence_failed.emit(f"{message}: {exc}")
