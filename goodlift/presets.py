"""Named timer presets (HIIT and yoga flow).

A preset is a snapshot of the fields one mode cares about.  Presets are
never edited in place: saving with an existing id replaces the record.

``from_dict`` accepts presets written by older versions, which stored
``rounds`` instead of ``rounds_per_set`` and ``recovery_interval``
instead of ``recovery_between_sets``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .timer.intervals import EXTENDED_REST_BONUS_SECONDS
from .timer.machine import (
    DEFAULT_FLOW_PHASES,
    FlowPhase,
    TimerConfiguration,
    TimerMode,
)


HIIT_FIELDS = (
    "work_interval",
    "work_rest_ratio",
    "rounds_per_set",
    "number_of_sets",
    "preparation_interval",
    "recovery_between_sets",
    "extended_rest_interval_minutes",
    "extended_rest_bonus",
    "session_length_minutes",
    "warmup_enabled",
    "warmup_minutes",
    "session_name",
    "work_interval_names",
    "prep_label",
    "recovery_label",
)

FLOW_FIELDS = ("phases",)

PRESET_MODES = (TimerMode.HIIT, TimerMode.FLOW)


def _fields_for(mode: TimerMode) -> tuple[str, ...]:
    if mode == TimerMode.HIIT:
        return HIIT_FIELDS
    if mode == TimerMode.FLOW:
        return FLOW_FIELDS
    raise ValueError(f"presets are not supported for {mode.value} mode")


@dataclass(frozen=True)
class Preset:
    name: str
    mode: TimerMode
    config: TimerConfiguration
    id: str | None = None

    @classmethod
    def from_configuration(
        cls,
        name: str,
        config: TimerConfiguration,
        preset_id: str | None = None,
    ) -> Preset:
        _fields_for(config.mode)
        return cls(name=name, mode=config.mode, config=config, id=preset_id)

    def apply(self, base: TimerConfiguration) -> TimerConfiguration:
        """Copy this preset's fields onto *base*, leaving other modes alone."""
        values = {f: getattr(self.config, f) for f in _fields_for(self.mode)}
        return replace(base, mode=self.mode, **values)

    def with_id(self, preset_id: str) -> Preset:
        return replace(self, id=preset_id)

    # ── serialization ─────────────────────────────────────────────────

    def payload(self) -> dict[str, Any]:
        """Mode-specific fields as plain JSON values."""
        config = self.config
        if self.mode == TimerMode.FLOW:
            return {
                "phases": [
                    {"name": p.name, "duration": p.duration_minutes}
                    for p in config.phases
                ],
            }
        return {
            "work_interval": config.work_interval,
            "rest_interval": config.rest_interval,
            "work_rest_ratio": config.work_rest_ratio,
            "rounds_per_set": config.rounds_per_set,
            "number_of_sets": config.number_of_sets,
            "preparation_interval": config.preparation_interval,
            "recovery_between_sets": config.recovery_between_sets,
            "extended_rest_interval_minutes": config.extended_rest_interval_minutes,
            "extended_rest_bonus": config.extended_rest_bonus,
            "session_length_minutes": config.session_length_minutes,
            "warmup_enabled": config.warmup_enabled,
            "warmup_minutes": config.warmup_minutes,
            "session_name": config.session_name,
            "work_interval_names": list(config.work_interval_names),
            "interval_names": {
                "prep": config.prep_label,
                "recovery": config.recovery_label,
            },
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mode": self.mode.value,
            **self.payload(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Preset:
        mode = TimerMode(data.get("mode", TimerMode.HIIT.value))
        if mode == TimerMode.FLOW:
            config = _flow_config(data)
        elif mode == TimerMode.HIIT:
            config = _hiit_config(data)
        else:
            raise ValueError(f"presets are not supported for {mode.value} mode")
        return cls(
            name=str(data.get("name", "")),
            mode=mode,
            config=config,
            id=data.get("id"),
        )


def _flow_config(data: dict[str, Any]) -> TimerConfiguration:
    raw = data.get("phases")
    if raw:
        phases = tuple(
            FlowPhase(str(p["name"]), p.get("duration", p.get("duration_minutes", 5)))
            for p in raw
        )
    else:
        phases = DEFAULT_FLOW_PHASES
    return TimerConfiguration(mode=TimerMode.FLOW, phases=phases)


def _value(data: dict[str, Any], key: str, default: Any) -> Any:
    """*key* from *data*; only a missing or null value takes the default."""
    value = data.get(key)
    return default if value is None else value


def _hiit_config(data: dict[str, Any]) -> TimerConfiguration:
    if "rounds" in data and "rounds_per_set" not in data:
        rounds_per_set, number_of_sets = data["rounds"], 1
    else:
        rounds_per_set = data.get("rounds_per_set") or 8
        number_of_sets = data.get("number_of_sets") or 1

    if "recovery_interval" in data and "recovery_between_sets" not in data:
        recovery = data["recovery_interval"] or 0
    else:
        recovery = data.get("recovery_between_sets") or 0

    names = data.get("interval_names") or {}
    return TimerConfiguration(
        mode=TimerMode.HIIT,
        work_interval=data.get("work_interval") or 30,
        work_rest_ratio=data.get("work_rest_ratio") or "2:1",
        rounds_per_set=rounds_per_set,
        number_of_sets=number_of_sets,
        preparation_interval=data.get("preparation_interval", 10),
        recovery_between_sets=recovery,
        extended_rest_interval_minutes=_value(data, "extended_rest_interval_minutes", 8),
        extended_rest_bonus=_value(data, "extended_rest_bonus", EXTENDED_REST_BONUS_SECONDS),
        session_length_minutes=data.get("session_length_minutes") or 10,
        warmup_enabled=data.get("warmup_enabled", True),
        warmup_minutes=_value(data, "warmup_minutes", 5),
        session_name=data.get("session_name") or "",
        work_interval_names=tuple(data.get("work_interval_names") or ()),
        prep_label=names.get("prep", "Get Ready"),
        recovery_label=names.get("recovery", "Set Break"),
    )
