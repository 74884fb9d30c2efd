"""Canonical workout history imported from third-party exports."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SetType(str, Enum):
    """Kind of a logged set."""
    NORMAL = "normal"
    WARMUP = "warmup"
    DROP = "drop"
    FAILURE = "failure"


@dataclass
class WorkoutSet:
    """A single logged set."""
    exercise: str
    weight: float = 0.0
    reps: float = 0.0
    rpe: Optional[float] = None
    set_type: SetType = SetType.NORMAL


@dataclass
class WorkoutSession:
    """All sets logged on one calendar day, in file order."""
    date: str
    title: str
    sets: List[WorkoutSet] = field(default_factory=list)

    @property
    def exercise_names(self) -> List[str]:
        """Distinct exercise names in first-seen order."""
        return list(dict.fromkeys(s.exercise for s in self.sets))
