"""Session services: input loading, the flow state machine and the session store."""

from .flow_controller import (
    AnalyzingVideo,
    AnsweringProfile,
    CapturingInput,
    DeepAnalyzing,
    FlowController,
    FlowStage,
    PreAnalyzing,
    SelectingPersona,
    ShowingResults,
    ShowingVideoResults,
    stage_name,
)
from .input_loader import build_routine_input, infer_kind, load_routine_input, validate_routine_input
from .session_store import SessionStore

__all__ = [
    "AnalyzingVideo",
    "AnsweringProfile",
    "CapturingInput",
    "DeepAnalyzing",
    "FlowController",
    "FlowStage",
    "PreAnalyzing",
    "SelectingPersona",
    "ShowingResults",
    "ShowingVideoResults",
    "stage_name",
    "build_routine_input",
    "infer_kind",
    "load_routine_input",
    "validate_routine_input",
    "SessionStore",
]
