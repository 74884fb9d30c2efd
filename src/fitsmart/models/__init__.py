"""Data models for the FitSmart auditor."""

from .analysis import (
    BiomechanicalAnalysis,
    DetectedExercise,
    ExerciseRecommendation,
    ExerciseType,
    ExperienceLevel,
    FeedbackType,
    PreAnalysisResult,
    SetupItem,
    SetupStatus,
    TrainingType,
    UserGoal,
    VideoAnalysisFeedback,
    VideoAnalysisMetrics,
    VideoAnalysisResult,
    WarmUpExercise,
)
from .profile import ProfileDraft, UserProfile, validate_profile
from .routine import (
    PERSONAS,
    InputKind,
    Persona,
    PersonaId,
    RoutineInput,
    UploadTab,
    list_personas,
)
from .workouts import SetType, WorkoutSession, WorkoutSet

__all__ = [
    "BiomechanicalAnalysis",
    "DetectedExercise",
    "ExerciseRecommendation",
    "ExerciseType",
    "ExperienceLevel",
    "FeedbackType",
    "InputKind",
    "PERSONAS",
    "Persona",
    "PersonaId",
    "PreAnalysisResult",
    "ProfileDraft",
    "RoutineInput",
    "SetType",
    "SetupItem",
    "SetupStatus",
    "TrainingType",
    "UploadTab",
    "UserGoal",
    "UserProfile",
    "VideoAnalysisFeedback",
    "VideoAnalysisMetrics",
    "VideoAnalysisResult",
    "WarmUpExercise",
    "WorkoutSession",
    "WorkoutSet",
    "list_personas",
    "validate_profile",
]
