"""Persona catalogue routes."""

from typing import List

from fastapi import APIRouter

from ...models.routine import list_personas
from ..schemas import PersonaResponse


router = APIRouter()


@router.get("", response_model=List[PersonaResponse])
async def get_personas() -> List[PersonaResponse]:
    """List the auditor personas in display order."""
    return [PersonaResponse.from_persona(persona) for persona in list_personas()]
