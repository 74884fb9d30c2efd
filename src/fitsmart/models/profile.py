"""User profile collected between pre-analysis and deep analysis."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .analysis import ExperienceLevel, PreAnalysisResult, TrainingType, UserGoal
from .routine import PersonaId
from .utils import to_camel

MIN_CUSTOM_ANSWER_LENGTH = 3

DEFAULT_AGE = 26
DEFAULT_GENDER = "Masculino"


class UserProfile(BaseModel):
    """A submitted, finalized profile. Immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    goal: str
    training_type: str
    experience: str
    age: int = Field(..., gt=0)
    gender: str
    injuries: str
    custom_answer: str
    persona: PersonaId


class ProfileDraft(BaseModel):
    """A profile being edited by the user. Every field may still be blank."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    goal: str = ""
    training_type: Optional[str] = None
    experience: str = ExperienceLevel.INTERMEDIATE.value
    age: Optional[int] = None
    gender: str = DEFAULT_GENDER
    injuries: str = ""
    custom_answer: str = ""

    @classmethod
    def from_pre_analysis(cls, pre_analysis: Optional[PreAnalysisResult]) -> "ProfileDraft":
        """Seed defaults from the detected training type and goal."""
        goal = UserGoal.HYPERTROPHY.value
        training_type = TrainingType.WEIGHTS.value
        if pre_analysis is not None:
            if pre_analysis.detected_goal_guess.strip():
                goal = pre_analysis.detected_goal_guess
            if pre_analysis.detected_training_type != TrainingType.UNDEFINED:
                training_type = pre_analysis.detected_training_type.value
        return cls(goal=goal, training_type=training_type, age=DEFAULT_AGE)

    def finalize(self, persona: PersonaId) -> UserProfile:
        """Merge the chosen persona into a validated, immutable profile."""
        return UserProfile(
            goal=self.goal.strip(),
            training_type=(self.training_type or "").strip(),
            experience=self.experience,
            age=self.age or 0,
            gender=self.gender,
            injuries=self.injuries.strip(),
            custom_answer=self.custom_answer.strip(),
            persona=persona,
        )


def validate_profile(draft: ProfileDraft) -> List[str]:
    """
    Return the names of required fields that do not validate.

    Submission is enabled only when the goal is non-empty, the training
    type is set, age is positive and the key answer has more than three
    characters after trimming.
    """
    problems: List[str] = []
    if not draft.goal.strip():
        problems.append("goal")
    if not (draft.training_type or "").strip():
        problems.append("trainingType")
    if draft.age is None or draft.age <= 0:
        problems.append("age")
    if len(draft.custom_answer.strip()) <= MIN_CUSTOM_ANSWER_LENGTH:
        problems.append("customAnswer")
    return problems
