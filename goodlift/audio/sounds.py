"""Tone synthesis and playback using numpy + QSoundEffect.

Every cue is generated as a short WAV file from sine waves that fade
out exponentially.  Files are cached to disk so later launches skip
synthesis.

Cues
----
- ``beep``                800 Hz tick, last seconds of a period
- ``high_beep``           1000 Hz, work starts
- ``low_beep``            400 Hz, rest starts
- ``chime``               800 Hz then 1000 Hz, yoga phase starts
- ``transition_beep``     700 Hz, preparation / set break / skip
- ``completion_fanfare``  C5→E5→G5→C6, session done
- ``countdown_beep``      three 600 Hz ticks

Playback is fire-and-forget: failures are logged and never reach the
timer.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from .cues import Cue

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "GoodLift"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = tuple(cue.value for cue in Cue)

SAMPLE_RATE = 44100
DEFAULT_VOLUME = 30  # percent


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


FADE_FLOOR = 0.01      # level the fade-out ends on, relative to the peak
ATTACK_SAMPLES = 40    # click-free onset


def _fade_envelope(length: int, attack: int = ATTACK_SAMPLES) -> np.ndarray:
    """Short linear onset, then an exponential fade down to ``FADE_FLOOR``."""
    if length <= 0:
        return np.zeros(0)
    env = np.geomspace(1.0, FADE_FLOOR, length)
    a = min(attack, length)
    env[:a] *= np.linspace(0.0, 1.0, a)
    return env


def _tone(freq: float, duration_s: float, level: float = 0.5) -> np.ndarray:
    """Faded sine at *freq* Hz."""
    count = int(SAMPLE_RATE * duration_s)
    phase = 2 * np.pi * freq * np.arange(count) / SAMPLE_RATE
    return np.sin(phase) * level * _fade_envelope(count)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _mix(parts: list[tuple[float, np.ndarray]]) -> np.ndarray:
    """Overlay ``(offset_seconds, samples)`` parts into one buffer."""
    starts = [int(SAMPLE_RATE * offset) for offset, _ in parts]
    out = np.zeros(max(s + len(p) for s, (_, p) in zip(starts, parts)))
    for start, (_, samples) in zip(starts, parts):
        out[start:start + len(samples)] += samples
    return out


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Mono 16-bit PCM WAV from float samples in -1..1."""
    pcm = (np.clip(samples, -1.0, 1.0) * np.iinfo(np.int16).max).astype("<i2")
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(pcm.dtype.itemsize)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_beep() -> bytes:
    return _to_wav_bytes(np.concatenate([_tone(800.0, 0.15), _silence(0.03)]))


def _generate_high_beep() -> bytes:
    return _to_wav_bytes(np.concatenate([_tone(1000.0, 0.3), _silence(0.03)]))


def _generate_low_beep() -> bytes:
    return _to_wav_bytes(np.concatenate([_tone(400.0, 0.3), _silence(0.03)]))


def _generate_transition_beep() -> bytes:
    return _to_wav_bytes(np.concatenate([_tone(700.0, 0.2), _silence(0.03)]))


def _generate_chime() -> bytes:
    """800 Hz, then 1000 Hz overlapping 150 ms later."""
    return _to_wav_bytes(_mix([
        (0.0, _tone(800.0, 0.2)),
        (0.15, _tone(1000.0, 0.4)),
    ]))


FANFARE_NOTES = (523.0, 659.0, 784.0, 1047.0)  # C5 E5 G5 C6


def _generate_completion_fanfare() -> bytes:
    """Ascending major arpeggio, one note every 150 ms."""
    return _to_wav_bytes(0.7 * _mix([
        (i * 0.15, _tone(freq, 0.3)) for i, freq in enumerate(FANFARE_NOTES)
    ]))


def _generate_countdown_beep() -> bytes:
    """Three 600 Hz ticks, 200 ms apart."""
    tick = _tone(600.0, 0.15)
    gap = _silence(0.05)
    return _to_wav_bytes(np.concatenate([tick, gap, tick, gap, tick, gap]))


_GENERATORS: dict[Cue, Callable[[], bytes]] = {
    Cue.BEEP: _generate_beep,
    Cue.HIGH_BEEP: _generate_high_beep,
    Cue.LOW_BEEP: _generate_low_beep,
    Cue.CHIME: _generate_chime,
    Cue.TRANSITION_BEEP: _generate_transition_beep,
    Cue.COMPLETION_FANFARE: _generate_completion_fanfare,
    Cue.COUNTDOWN_BEEP: _generate_countdown_beep,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Synthesizes, caches and plays the timer cues.

    Usage::

        sounds = SoundManager(parent=self)
        sounds.set_volume(30)
        engine = TimerEngine(sounds=sounds)   # engine.cue → sounds.play
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = DEFAULT_VOLUME / 100.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[Cue, QSoundEffect] = {}

        try:
            self._ensure_wav_files()
        except OSError as exc:
            logger.warning("Could not write cue files to %s: %s", self._sounds_dir, exc)
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def toggle_mute(self) -> bool:
        """Flip mute.  Returns True when now muted."""
        self._enabled = not self._enabled
        return not self._enabled

    def play(self, cue: Cue | str) -> None:
        """Play a cue.  No-op if muted or the cue is unknown."""
        if not self._enabled:
            return
        try:
            effect = self._effects.get(Cue(cue))
        except ValueError:
            logger.warning("Unknown cue %r", cue)
            return
        if effect is None:
            return
        try:
            effect.play()
        except Exception as exc:
            logger.warning("Could not play %s: %s", cue, exc)

    def play_beep(self) -> None:
        self.play(Cue.BEEP)

    def play_high_beep(self) -> None:
        self.play(Cue.HIGH_BEEP)

    def play_low_beep(self) -> None:
        self.play(Cue.LOW_BEEP)

    def play_chime(self) -> None:
        self.play(Cue.CHIME)

    def play_transition_beep(self) -> None:
        self.play(Cue.TRANSITION_BEEP)

    def play_completion_fanfare(self) -> None:
        self.play(Cue.COMPLETION_FANFARE)

    def play_countdown_beep(self) -> None:
        self.play(Cue.COUNTDOWN_BEEP)

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def loaded_cues(self) -> tuple[Cue, ...]:
        return tuple(self._effects)

    def cue_path(self, cue: Cue) -> Path:
        return self._sounds_dir / f"{cue.value}.wav"

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Synthesize any cue whose WAV is not cached yet."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        missing = [cue for cue in Cue if not self.cue_path(cue).exists()]
        for cue in missing:
            self.cue_path(cue).write_bytes(_GENERATORS[cue]())
        if missing:
            logger.debug("Synthesized %d cue files in %s", len(missing), self._sounds_dir)

    def _load_effects(self) -> None:
        """One QSoundEffect per cached cue; missing files stay silent."""
        for cue in Cue:
            path = self.cue_path(cue)
            if not path.exists():
                continue
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume)
            self._effects[cue] = effect
