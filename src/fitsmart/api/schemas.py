"""
API schemas for request/response validation.

Session responses are snapshots of the flow controller state, with
camelCase keys like the rest of the API.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.analysis import BiomechanicalAnalysis, PreAnalysisResult, VideoAnalysisResult
from ..models.profile import ProfileDraft, UserProfile
from ..models.routine import InputKind, Persona, PersonaId, RoutineInput, UploadTab
from ..models.utils import to_camel
from ..services.flow_controller import FlowController


PREVIEW_CHARS = 200


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Error Models
# ============================================================================

class ErrorDetail(BaseModel):
    """Error detail for API responses."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "FLOW_BUSY",
                    "message": "An analysis is already in progress for this session",
                }
            }
        }
    )


# ============================================================================
# Persona Schemas
# ============================================================================

class PersonaResponse(ApiModel):
    """A persona as shown in the selector."""

    id: PersonaId
    name: str
    role: str
    description: str
    loading_message: str

    @classmethod
    def from_persona(cls, persona: Persona) -> "PersonaResponse":
        return cls(
            id=persona.id,
            name=persona.name,
            role=persona.role,
            description=persona.description,
            loading_message=persona.loading_message,
        )


class PersonaSelection(ApiModel):
    """Request body for choosing a persona."""

    persona: PersonaId


# ============================================================================
# Session Schemas
# ============================================================================

class InputSummary(ApiModel):
    """Captured input without its (possibly large) payload."""

    kind: InputKind
    media_type: Optional[str] = None
    content_length: int = Field(..., ge=0, description="Length of the content in characters")
    preview: Optional[str] = Field(None, description="Leading text for text kinds")

    @classmethod
    def from_input(cls, routine: RoutineInput) -> "InputSummary":
        preview = None if routine.kind.is_binary else routine.content[:PREVIEW_CHARS]
        return cls(
            kind=routine.kind,
            media_type=routine.media_type,
            content_length=len(routine.content),
            preview=preview,
        )


class SessionSnapshot(ApiModel):
    """Full observable state of one session."""

    session_id: str
    stage: str
    busy: bool
    error: Optional[str] = None
    upload_tab: Optional[UploadTab] = None
    input: Optional[InputSummary] = None
    persona: Optional[PersonaId] = None
    pre_analysis: Optional[PreAnalysisResult] = None
    profile_draft: Optional[ProfileDraft] = None
    profile: Optional[UserProfile] = None
    analysis: Optional[BiomechanicalAnalysis] = None
    video_result: Optional[VideoAnalysisResult] = None
    imported_sessions: int = 0

    @classmethod
    def from_controller(cls, session_id: str, controller: FlowController) -> "SessionSnapshot":
        stage = controller.stage
        routine = getattr(stage, "input", None)
        return cls(
            session_id=session_id,
            stage=controller.stage_name,
            busy=controller.busy,
            error=controller.error,
            upload_tab=getattr(stage, "upload_tab", None),
            input=InputSummary.from_input(routine) if routine is not None else None,
            persona=getattr(stage, "persona", None),
            pre_analysis=getattr(stage, "pre_analysis", None),
            profile_draft=getattr(stage, "draft", None),
            profile=getattr(stage, "profile", None),
            analysis=getattr(stage, "analysis", None),
            video_result=getattr(stage, "result", None),
            imported_sessions=len(getattr(stage, "workout_sessions", ())),
        )
