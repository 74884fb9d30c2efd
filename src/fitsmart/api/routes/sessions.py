"""Audit session routes.

Each route drives one FlowController transition and returns the resulting
session snapshot. Stage routes await the engine call; a reset that arrives
meanwhile is honoured and the late result is discarded.
"""

import logging
import mimetypes
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from fastapi.responses import PlainTextResponse

from ...exceptions import FlowTransitionError
from ...models.profile import ProfileDraft
from ...models.routine import InputKind, RoutineInput
from ...report.renderer import render_report
from ...services.flow_controller import FlowController, ShowingResults
from ...services.session_store import SessionStore
from ..deps import get_flow, get_session_store
from ..schemas import PersonaSelection, SessionSnapshot


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SessionSnapshot, status_code=201)
async def create_session(store: SessionStore = Depends(get_session_store)) -> SessionSnapshot:
    """Start a new audit session."""
    session_id, controller = store.create()
    logger.info(f"Created session {session_id}")
    return SessionSnapshot.from_controller(session_id, controller)


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(
    session_id: str,
    controller: FlowController = Depends(get_flow),
) -> SessionSnapshot:
    """Get the current state of a session."""
    return SessionSnapshot.from_controller(session_id, controller)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Response:
    """Discard a session."""
    store.delete(session_id)
    return Response(status_code=204)


@router.post("/{session_id}/input", response_model=SessionSnapshot)
async def capture_input(
    session_id: str,
    routine: RoutineInput,
    controller: FlowController = Depends(get_flow),
) -> SessionSnapshot:
    """
    Capture a routine input sent as JSON.

    Binary kinds carry base64 content and a media type. Video input runs
    the video analysis before responding.
    """
    await controller.capture_input(routine)
    return SessionSnapshot.from_controller(session_id, controller)


@router.post("/{session_id}/upload", response_model=SessionSnapshot)
async def upload_input(
    session_id: str,
    file: UploadFile = File(...),
    kind: Optional[InputKind] = Form(None),
    controller: FlowController = Depends(get_flow),
) -> SessionSnapshot:
    """Capture a routine input from a multipart file upload."""
    filename = file.filename or "upload"
    media_type = mimetypes.guess_type(filename)[0] or file.content_type
    data = await file.read()
    await controller.capture_file(filename, data, kind=kind, media_type=media_type)
    return SessionSnapshot.from_controller(session_id, controller)


@router.post("/{session_id}/persona", response_model=SessionSnapshot)
async def select_persona(
    session_id: str,
    selection: PersonaSelection,
    controller: FlowController = Depends(get_flow),
) -> SessionSnapshot:
    """Choose the persona and run the pre-analysis."""
    await controller.select_persona(selection.persona)
    return SessionSnapshot.from_controller(session_id, controller)


@router.get("/{session_id}/profile-defaults", response_model=ProfileDraft)
async def get_profile_defaults(controller: FlowController = Depends(get_flow)) -> ProfileDraft:
    """Questionnaire prefill for the current pre-analysis."""
    return controller.profile_defaults()


@router.post("/{session_id}/profile", response_model=SessionSnapshot)
async def submit_profile(
    session_id: str,
    draft: ProfileDraft,
    controller: FlowController = Depends(get_flow),
) -> SessionSnapshot:
    """Submit the profile and run the deep analysis."""
    await controller.submit_profile(draft)
    return SessionSnapshot.from_controller(session_id, controller)


@router.post("/{session_id}/reset", response_model=SessionSnapshot)
async def reset_session(
    session_id: str,
    controller: FlowController = Depends(get_flow),
) -> SessionSnapshot:
    """Return the session to input capture, discarding everything downstream."""
    controller.reset()
    return SessionSnapshot.from_controller(session_id, controller)


@router.post("/{session_id}/restart-video", response_model=SessionSnapshot)
async def restart_video(
    session_id: str,
    controller: FlowController = Depends(get_flow),
) -> SessionSnapshot:
    """Clear a finished video analysis and reopen the video tab."""
    controller.restart_video()
    return SessionSnapshot.from_controller(session_id, controller)


@router.get("/{session_id}/report", response_class=PlainTextResponse)
async def get_report(controller: FlowController = Depends(get_flow)) -> PlainTextResponse:
    """Render the finished audit as a plain-text report."""
    stage = controller.stage
    if not isinstance(stage, ShowingResults):
        raise FlowTransitionError(operation="export report", stage=controller.stage_name)
    return PlainTextResponse(render_report(stage.analysis, stage.profile))
