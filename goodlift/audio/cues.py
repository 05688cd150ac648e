"""Named audio cues emitted by the timer.

Kept free of Qt so the pure state machine can refer to cues without
pulling in QtMultimedia.
"""

from enum import Enum


class Cue(Enum):
    BEEP = "beep"                              # countdown tick at 3 s / 2 s
    HIGH_BEEP = "high_beep"                    # work period starts
    LOW_BEEP = "low_beep"                      # rest period starts
    CHIME = "chime"                            # flow phase starts
    TRANSITION_BEEP = "transition_beep"        # prep / set break / manual skip
    COMPLETION_FANFARE = "completion_fanfare"  # session finished
    COUNTDOWN_BEEP = "countdown_beep"          # triple beep
