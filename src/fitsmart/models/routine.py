"""Captured routine input and persona catalogue."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .utils import to_camel


class InputKind(str, Enum):
    """Kinds of routine input the flow accepts."""
    TEXT = "text"
    IMAGE = "image"
    PDF = "pdf"
    URL = "url"
    CSV = "csv"
    VIDEO = "video"

    @property
    def is_binary(self) -> bool:
        """Binary kinds carry base64 content."""
        return self in (InputKind.IMAGE, InputKind.PDF, InputKind.VIDEO)


class UploadTab(str, Enum):
    """Upload tab preselected when the flow returns to input capture."""
    APP = "app"
    UPLOAD = "upload"
    VIDEO = "video"
    TEXT = "text"
    URL = "url"


class RoutineInput(BaseModel):
    """
    A captured routine.

    ``content`` is raw text for text/url/csv kinds and base64 for
    image/pdf/video kinds. Replaced wholesale on retry.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    kind: InputKind
    content: str
    media_type: Optional[str] = Field(default=None, description="MIME type for binary kinds")


class PersonaId(str, Enum):
    """The three auditor personas."""
    SARA = "sara"
    TODOR = "todor"
    RAUL = "raul"


@dataclass(frozen=True)
class Persona:
    """Display metadata for a persona."""
    id: PersonaId
    name: str
    role: str
    description: str
    loading_message: str


PERSONAS: Dict[PersonaId, Persona] = {
    PersonaId.SARA: Persona(
        id=PersonaId.SARA,
        name="Sara",
        role="Sevillana / Sin Filtros",
        description=(
            "Illo, si tu técnica es una papa, te lo voy a decir. Aquí no venimos a pasear "
            "la toalla, miarma. Menos excusas y más arte, ¡ave!"
        ),
        loading_message="Sara está juzgando...",
    ),
    PersonaId.TODOR: Persona(
        id=PersonaId.TODOR,
        name="Dr. Todor",
        role="Madrileño / Biomecánica",
        description=(
            "En plan, tu vector de fuerza no renta nada, tronco. Si no optimizas el brazo "
            "de momento me raya mazo. Datos, no opiniones, ¿sabes?"
        ),
        loading_message="Calculando vectores...",
    ),
    PersonaId.RAUL: Persona(
        id=PersonaId.RAUL,
        name='Raúl "O Bestia"',
        role="Gallego / Motivación",
        description=(
            "Malo será que no crezcas, neno. ¡Déjate de ser riquiño con los pesos y dale "
            "carallo! Si no duele, no vale. Sentidiño y a ferro."
        ),
        loading_message="¡MOTIVANDO A LA IA!",
    ),
}


def list_personas() -> List[Persona]:
    """Personas in display order."""
    return [PERSONAS[persona_id] for persona_id in PersonaId]
