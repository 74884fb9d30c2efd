"""Shared fixtures for the FitSmart test suite."""

import json
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from fitsmart.config import Settings
from fitsmart.llm.providers import EngineRequest, EngineResponse, ReasoningEngine, StageConfig
from fitsmart.models.analysis import BiomechanicalAnalysis, PreAnalysisResult, VideoAnalysisResult
from fitsmart.models.routine import InputKind, RoutineInput


# ============================================================================
# Engine payloads
# ============================================================================

PRE_ANALYSIS_PAYLOAD = {
    "detectedTrainingType": "Pesas / Gym",
    "detectedGoalGuess": "Hipertrofia (Ganancia Muscular)",
    "confidenceScore": 85,
    "summaryObservation": "Illo, mucho pecho y poca pierna, miarma.",
    "specificQuestion": "¿Cómo te recuperas entre la sesión de pierna y la de espalda?",
}

DEEP_ANALYSIS_PAYLOAD = {
    "summary": "Ole tu arte, pero te falta volumen de pierna.",
    "score": 72,
    "detectedExercises": [
        {
            "name": "Sentadilla",
            "targetGroup": "Pierna",
            "type": "Compuesto",
            "variantDetected": "Barra Alta",
            "technicalTip": "Rompe la paralela, picha.",
        }
    ],
    "safetyAssessment": "Demasiado volumen de press sin tirón.",
    "alignmentWithGoal": "Aceptable para hipertrofia.",
    "warmUpRecommendations": [
        {"name": "Puente de glúteo", "description": "Activa esos glúteos.", "dosage": "2 series x 15 reps"}
    ],
    "modifications": [
        {
            "original": "Press francés",
            "recommended": "Remo con barra",
            "sets": "4",
            "reps": "8-10",
            "rest": "90s",
            "reason": "Te falta tirón, una jartá.",
            "youtubeQuery": "remo con barra técnica",
        }
    ],
    "generalAdvice": ["Duerme más.", "Come más proteína."],
}

VIDEO_ANALYSIS_PAYLOAD = {
    "exerciseName": "Sentadilla",
    "variant": "Barra baja",
    "repCount": 5,
    "repsTimeline": ["00:02-00:05", "00:06-00:09"],
    "confidence": 92,
    "cameraAngle": "Lateral",
    "setupDetails": [
        {"label": "Posición de barra", "value": "Baja en deltoides", "status": "OK"}
    ],
    "metrics": {"depth": "Válida", "lockout": "Sólido", "rom": "Completo", "tempo": "2-0-1"},
    "feedback": {
        "type": "optimization",
        "text": "Buena profundidad, acelera la concéntrica.",
        "positive": ["Profundidad consistente"],
        "negative": ["Tempo lento al salir del hoyo"],
        "youtubeQuery": "sentadilla barra baja tempo",
    },
}


@pytest.fixture
def pre_analysis_payload():
    return dict(PRE_ANALYSIS_PAYLOAD)


@pytest.fixture
def deep_analysis_payload():
    return json.loads(json.dumps(DEEP_ANALYSIS_PAYLOAD))


@pytest.fixture
def video_analysis_payload():
    return json.loads(json.dumps(VIDEO_ANALYSIS_PAYLOAD))


@pytest.fixture
def pre_analysis() -> PreAnalysisResult:
    return PreAnalysisResult.model_validate(PRE_ANALYSIS_PAYLOAD)


@pytest.fixture
def deep_analysis() -> BiomechanicalAnalysis:
    return BiomechanicalAnalysis.model_validate(DEEP_ANALYSIS_PAYLOAD)


@pytest.fixture
def video_result() -> VideoAnalysisResult:
    return VideoAnalysisResult.model_validate(VIDEO_ANALYSIS_PAYLOAD)


# ============================================================================
# Settings and inputs
# ============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, openai_api_key="sk-test-key-0000000000000000")


@pytest.fixture
def text_input() -> RoutineInput:
    return RoutineInput(
        kind=InputKind.TEXT,
        content="Lunes: press banca 4x8, aperturas 3x12\nMiércoles: sentadilla 5x5",
    )


@pytest.fixture
def image_input() -> RoutineInput:
    # "fake png bytes" in base64
    return RoutineInput(kind=InputKind.IMAGE, content="ZmFrZSBwbmcgYnl0ZXM=", media_type="image/png")


@pytest.fixture
def video_input() -> RoutineInput:
    # "fake mp4 bytes" in base64
    return RoutineInput(kind=InputKind.VIDEO, content="ZmFrZSBtcDQgYnl0ZXM=", media_type="video/mp4")


HEVY_CSV = """title,start_time,end_time,description,exercise_title,superset_id,exercise_notes,set_index,set_type,weight_kg,reps,distance_km,duration_seconds,rpe
"Push Day","2024-03-05 18:00:00","2024-03-05 19:10:00","",Bench Press (Barbell),,,0,warmup,60,10,,,
"Push Day","2024-03-05 18:00:00","2024-03-05 19:10:00","",Bench Press (Barbell),,,1,normal,80,8,,,8
"Push Day","2024-03-05 18:00:00","2024-03-05 19:10:00","",Overhead Press (Barbell),,,0,normal,45,6,,,8.5
"Leg Day","2024-03-07 18:00:00","2024-03-07 19:00:00","",Squat (Barbell),,,0,normal,100,5,,,
"Leg Day","2024-03-07 18:00:00","2024-03-07 19:00:00","",Squat (Barbell),,,1,failure,100,4,,,10
"Pull Day","2024-02-28 18:00:00","2024-02-28 19:00:00","",Deadlift (Barbell),,,0,normal,140,3,,,
"""


@pytest.fixture
def hevy_csv() -> str:
    return HEVY_CSV


# ============================================================================
# Engine doubles
# ============================================================================

class ScriptedEngine(ReasoningEngine):
    """Engine that replays scripted response texts and records requests."""

    provider = "scripted"

    def __init__(self, texts: Optional[List[Optional[str]]] = None):
        super().__init__()
        self.texts = list(texts or [])
        self.requests: List[EngineRequest] = []
        self.configs: List[StageConfig] = []

    async def _send(self, request: EngineRequest, config: StageConfig) -> EngineResponse:
        self.requests.append(request)
        self.configs.append(config)
        return EngineResponse(text=self.texts.pop(0), model=config.model)


@pytest.fixture
def scripted_engine():
    return ScriptedEngine


@pytest.fixture
def mock_gateway(pre_analysis, deep_analysis, video_result):
    """Gateway double whose stages succeed."""
    gateway = MagicMock()
    gateway.pre_analyze = AsyncMock(return_value=pre_analysis)
    gateway.analyze_deep = AsyncMock(return_value=deep_analysis)
    gateway.analyze_video = AsyncMock(return_value=video_result)
    return gateway
