"""Dependency injection for API routes."""

from functools import lru_cache

from fastapi import Depends

from ..agents.analysis_gateway import AnalysisGateway, build_stage_configs
from ..config import get_settings
from ..services.flow_controller import FlowController
from ..services.session_store import SessionStore


@lru_cache
def get_analysis_gateway() -> AnalysisGateway:
    """Get the analysis gateway instance. The engine is created on first use."""
    return AnalysisGateway(stage_configs=build_stage_configs(get_settings()))


@lru_cache
def get_session_store() -> SessionStore:
    """Get the session store instance."""
    settings = get_settings()
    gateway = get_analysis_gateway()
    return SessionStore(
        factory=lambda: FlowController(gateway, settings=settings),
        max_size=settings.max_sessions,
    )


def get_flow(session_id: str, store: SessionStore = Depends(get_session_store)) -> FlowController:
    """Resolve the controller for a session id (404 if unknown)."""
    return store.get(session_id)
