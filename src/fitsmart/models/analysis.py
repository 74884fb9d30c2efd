"""Typed results produced by the reasoning engine stages."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import to_camel


class TrainingType(str, Enum):
    """Training modality."""
    WEIGHTS = "Pesas / Gym"
    CALISTHENICS = "Calistenia"
    FUNCTIONAL = "Entrenamiento Funcional / CrossFit"
    HOME_WORKOUT = "En Casa"
    HYBRID = "Híbrido"
    POWERLIFTING = "Powerlifting"
    YOGA_PILATES = "Yoga / Pilates"
    UNDEFINED = "No identificado"


class UserGoal(str, Enum):
    """Common training goals."""
    HYPERTROPHY = "Hipertrofia (Ganancia Muscular)"
    STRENGTH = "Fuerza Máxima"
    ENDURANCE = "Resistencia"
    WEIGHT_LOSS = "Pérdida de Peso"
    MOBILITY = "Movilidad y Salud"
    REHAB = "Rehabilitación"


class ExperienceLevel(str, Enum):
    """Training experience buckets."""
    BEGINNER = "Principiante (< 1 año)"
    INTERMEDIATE = "Intermedio (1-3 años)"
    ADVANCED = "Avanzado (> 3 años)"


class ExerciseType(str, Enum):
    """Exercise classification as emitted by the engine."""
    COMPOUND = "Compuesto"
    ISOLATION = "Aislamiento"
    CARDIO = "Cardio"
    MOBILITY = "Movilidad"

    @classmethod
    def _missing_(cls, value):
        # Accept English labels and case variants
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if lowered in (member.name.lower(), member.value.lower()):
                    return member
        return None


class SetupStatus(str, Enum):
    """Whether a setup checkpoint passed."""
    OK = "OK"
    ATTENTION = "ATTENTION"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


class FeedbackType(str, Enum):
    """Safety correction versus performance optimization."""
    CORRECTION = "correction"
    OPTIMIZATION = "optimization"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class EngineModel(BaseModel):
    """Base for models decoded from engine JSON (camelCase keys)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )


# ============================================================================
# Pre-analysis
# ============================================================================

class PreAnalysisResult(EngineModel):
    """First-pass classification plus the follow-up question."""

    detected_training_type: TrainingType
    detected_goal_guess: str
    confidence_score: float = Field(..., ge=0, le=100)
    summary_observation: str
    specific_question: str

    @field_validator("detected_training_type", mode="before")
    @classmethod
    def _unknown_training_type(cls, value):
        if isinstance(value, str) and value not in {t.value for t in TrainingType}:
            try:
                return TrainingType[value.strip().upper().replace(" ", "_")]
            except KeyError:
                return TrainingType.UNDEFINED
        return value

    @field_validator("summary_observation", "specific_question", "detected_goal_guess")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


# ============================================================================
# Deep analysis
# ============================================================================

class DetectedExercise(EngineModel):
    """An exercise found in the routine or history."""

    name: str
    target_group: str
    type: ExerciseType
    variant_detected: str
    technical_tip: Optional[str] = None


class WarmUpExercise(EngineModel):
    """A goal-specific warm-up drill."""

    name: str
    description: str
    dosage: str


class ExerciseRecommendation(EngineModel):
    """A suggested change to the routine."""

    original: Optional[str] = None
    recommended: str
    sets: str
    reps: str
    rest: str
    reason: str
    youtube_query: str


class BiomechanicalAnalysis(EngineModel):
    """Scored, persona-voiced critique of a routine."""

    summary: str
    score: int = Field(..., ge=0, le=100)
    detected_exercises: List[DetectedExercise]
    safety_assessment: str
    alignment_with_goal: str
    warm_up_recommendations: List[WarmUpExercise]
    modifications: List[ExerciseRecommendation]
    general_advice: List[str]

    @field_validator("score", mode="before")
    @classmethod
    def _round_score(cls, value):
        # Engines sometimes emit 72.5
        if isinstance(value, float):
            return round(value)
        return value


# ============================================================================
# Video analysis
# ============================================================================

class SetupItem(EngineModel):
    """A setup checkpoint from the technical rubric."""

    label: str
    value: str
    status: SetupStatus
    recommendation: Optional[str] = None
    shopping_query: Optional[str] = None


class VideoAnalysisMetrics(EngineModel):
    """Movement metrics; each is absent when the camera angle cannot show it."""

    depth: Optional[str] = None
    lockout: Optional[str] = None
    rom: Optional[str] = None
    tempo: Optional[str] = None
    bar_path: Optional[str] = None
    stability: Optional[str] = None


class VideoAnalysisFeedback(EngineModel):
    """Headline feedback for the lift."""

    type: FeedbackType
    text: str
    positive: List[str]
    negative: List[str]
    youtube_query: str


class VideoAnalysisResult(EngineModel):
    """Rep count and technical judgement of a lift video."""

    exercise_name: str
    variant: str
    rep_count: int = Field(..., ge=0)
    confidence: float = Field(..., ge=0, le=100)
    camera_angle: str
    reps_timeline: Optional[List[str]] = None
    setup_details: List[SetupItem]
    metrics: VideoAnalysisMetrics
    feedback: VideoAnalysisFeedback
