"""Reasoning engine integration for the FitSmart auditor."""

from .decoder import DecodeStage, decode_json_object, decode_model, decode_with_stage
from .providers import (
    EngineRequest,
    EngineResponse,
    GeminiEngine,
    MediaPart,
    OpenAIEngine,
    ReasoningEngine,
    ResponseFormat,
    StageConfig,
    TextPart,
    create_engine,
    get_engine,
)

__all__ = [
    "DecodeStage",
    "decode_json_object",
    "decode_model",
    "decode_with_stage",
    "EngineRequest",
    "EngineResponse",
    "GeminiEngine",
    "MediaPart",
    "OpenAIEngine",
    "ReasoningEngine",
    "ResponseFormat",
    "StageConfig",
    "TextPart",
    "create_engine",
    "get_engine",
]
