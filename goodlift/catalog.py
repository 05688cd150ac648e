"""Static exercise catalog used for naming HIIT rounds.

The catalog is a JSON array of records shaped like::

    {"Exercise Name": "Burpee", "Primary Muscle": "Full Body",
     "Secondary Muscles": "Chest, Quads", "Equipment": "Bodyweight"}

It is read once and never written.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Exercise:
    name: str
    primary_muscle: str = ""
    secondary_muscles: tuple[str, ...] = ()
    equipment: str = ""

    @classmethod
    def from_record(cls, record: dict) -> Exercise:
        name = str(record["Exercise Name"]).strip()
        if not name:
            raise ValueError("exercise without a name")
        secondary = record.get("Secondary Muscles") or ()
        if isinstance(secondary, str):
            secondary = secondary.split(",")
        return cls(
            name=name,
            primary_muscle=str(record.get("Primary Muscle") or "").strip(),
            secondary_muscles=tuple(m.strip() for m in secondary if m.strip()),
            equipment=str(record.get("Equipment") or "").strip(),
        )

    @property
    def search_text(self) -> str:
        return f"{self.name} {self.primary_muscle}".lower()


class ExerciseCatalog:

    def __init__(self, exercises: Iterable[Exercise] = ()) -> None:
        self._exercises: tuple[Exercise, ...] = tuple(exercises)

    def __len__(self) -> int:
        return len(self._exercises)

    def __iter__(self):
        return iter(self._exercises)

    @property
    def names(self) -> list[str]:
        return [ex.name for ex in self._exercises]

    def search(self, text: str, limit: int | None = None) -> list[Exercise]:
        """Exercises matching every whitespace-separated term.

        Terms are matched case-insensitively against the name and the
        primary muscle.  Empty text matches everything.
        """
        terms = text.lower().split()
        matches = [
            ex for ex in self._exercises
            if all(term in ex.search_text for term in terms)
        ]
        return matches if limit is None else matches[:limit]

    def by_muscle(self, muscle: str) -> list[Exercise]:
        """Exercises that hit *muscle* as primary or secondary."""
        wanted = muscle.strip().lower()
        return [
            ex for ex in self._exercises
            if ex.primary_muscle.lower() == wanted
            or wanted in (m.lower() for m in ex.secondary_muscles)
        ]

    def muscles(self) -> list[str]:
        return sorted({ex.primary_muscle for ex in self._exercises if ex.primary_muscle})

    def equipment(self) -> list[str]:
        return sorted({ex.equipment for ex in self._exercises if ex.equipment})


def parse_catalog(records: Iterable[dict]) -> ExerciseCatalog:
    """Build a catalog, skipping records that lack a usable name."""
    exercises = []
    for index, record in enumerate(records):
        try:
            exercises.append(Exercise.from_record(record))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Skipping malformed exercise record #%d", index)
    return ExerciseCatalog(exercises)


def load_catalog(path: Path) -> ExerciseCatalog:
    """Read the JSON catalog at *path*."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of exercises")
    catalog = parse_catalog(data)
    logger.info("Loaded %d exercises from %s", len(catalog), path)
    return catalog
