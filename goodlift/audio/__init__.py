"""Audio package."""

from .cues import Cue

__all__ = ["Cue"]
