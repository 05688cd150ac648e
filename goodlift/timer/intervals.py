"""Pure interval arithmetic for the HIIT timer.

Nothing in here touches Qt or storage.  Every function is deterministic,
so each one can be checked against a plain table of inputs.

Extended rests
--------------
Every ``interval_minutes`` of active HIIT time one rest period gets a
bonus.  The rest chosen is the one whose *end* lands closest to the next
interval boundary, so the longer recovery finishes right at the boundary.
The search is limited to two round-durations either side of the boundary.
Times are measured in active seconds (work + base rest, no preparation,
no set breaks, no bonus seconds).
"""

from __future__ import annotations

import math


# ── constants ─────────────────────────────────────────────────────────────

EXTENDED_REST_BONUS_SECONDS = 60
TIME_COMPARISON_TOLERANCE = 0.5  # seconds
SEARCH_RADIUS_ROUNDS = 2
SUPPORTED_RATIOS = ("1:1", "3:2", "2:1")


# ── work / rest / rounds ──────────────────────────────────────────────────


def parse_ratio(ratio: str) -> tuple[int, int]:
    """Split a ``"W:R"`` ratio string into positive integer parts."""
    try:
        work_part, rest_part = (int(part) for part in ratio.split(":"))
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"invalid work:rest ratio {ratio!r}") from exc
    if work_part <= 0 or rest_part <= 0:
        raise ValueError(f"invalid work:rest ratio {ratio!r}")
    return work_part, rest_part


def rest_from_work(work: int, ratio: str) -> int:
    """Rest seconds for *work* seconds at *ratio*: ``ceil(work * R / W)``."""
    work_part, rest_part = parse_ratio(ratio)
    return max(1, -(-(work * rest_part) // work_part))


def rounds_for_session(
    session_minutes: float,
    work: int,
    rest: int,
    warmup_enabled: bool,
    warmup_minutes: float,
) -> int:
    """Rounds needed to fill a session, never fewer than one."""
    warmup_seconds = warmup_minutes * 60 if warmup_enabled else 0
    available = session_minutes * 60 - warmup_seconds
    round_duration = work + rest
    if available <= 0 or round_duration <= 0:
        return 1
    return max(1, math.ceil(available / round_duration))


def elapsed_from_position(
    set_index: int,
    round_index: int,
    is_work: bool,
    rounds_per_set: int,
    work: int,
    rest: int,
) -> int:
    """Active seconds elapsed when the given period starts.

    ``set_index`` and ``round_index`` are 1-based.  For a rest period the
    work of the same round is already behind us.
    """
    round_duration = work + rest
    elapsed = (set_index - 1) * rounds_per_set * round_duration
    elapsed += (round_index - 1) * round_duration
    if not is_work:
        elapsed += work
    return elapsed


# ── extended rest schedule ────────────────────────────────────────────────


def next_extended_rest_time(
    elapsed: float,
    interval_minutes: float,
    work: int,
    rest: int,
) -> float:
    """Start time of the rest that should carry the next bonus.

    The target is the next multiple of ``interval_minutes * 60`` after
    *elapsed*.  Candidates are ranked by where the rest *ends*, and the
    winner's start is returned.  Ties go to the later rest.  When no rest
    period lies in the search window the raw target is returned.
    """
    if interval_minutes <= 0:
        raise ValueError("extended rest interval must be positive")
    interval = interval_minutes * 60
    target = (math.floor(elapsed / interval) + 1) * interval

    round_duration = work + rest
    if round_duration <= 0:
        return target

    radius = round_duration * SEARCH_RADIUS_ROUNDS
    low = max(0, target - radius)
    high = target + radius

    best: float | None = None
    best_distance = 0.0
    k = max(0, math.floor((low - round_duration) / round_duration))
    while True:
        start = k * round_duration + work
        end = start + rest
        k += 1
        if end > high:
            break
        if end < low:
            continue
        distance = abs(end - target)
        if best is None or distance < best_distance:
            best, best_distance = start, distance
        elif distance == best_distance:
            best = max(best, start)

    return target if best is None else best


def extended_rest_anchor(rest_end: float, interval_minutes: float) -> float:
    """The interval boundary an extended rest ending at *rest_end* served."""
    interval = interval_minutes * 60
    return max(1, math.floor(rest_end / interval + 0.5)) * interval


def following_extended_rest_time(
    extended_start: float,
    interval_minutes: float,
    work: int,
    rest: int,
) -> float:
    """Next bonus rest after the one starting at *extended_start*.

    Always strictly later than *extended_start*.
    """
    interval = interval_minutes * 60
    anchor = extended_rest_anchor(extended_start + rest, interval_minutes)
    candidate = next_extended_rest_time(anchor, interval_minutes, work, rest)
    while candidate <= extended_start + TIME_COMPARISON_TOLERANCE:
        anchor += interval
        candidate = next_extended_rest_time(anchor, interval_minutes, work, rest)
    return candidate


def pending_extended_rest_time(
    elapsed: float,
    interval_minutes: float,
    work: int,
    rest: int,
) -> float:
    """First scheduled bonus rest at or after *elapsed*.

    Replays the schedule continuous ticking would follow from the start
    of the session, so a jump to any position lands on the same value.
    """
    scheduled = next_extended_rest_time(0, interval_minutes, work, rest)
    while scheduled < elapsed - TIME_COMPARISON_TOLERANCE:
        scheduled = following_extended_rest_time(
            scheduled, interval_minutes, work, rest,
        )
    return scheduled


def is_extended_rest_time(elapsed: float, scheduled: float | None) -> bool:
    if scheduled is None:
        return False
    return abs(elapsed - scheduled) < TIME_COMPARISON_TOLERANCE


# ── display ───────────────────────────────────────────────────────────────


def format_time(seconds: int) -> str:
    """``125`` → ``"2:05"``."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"
