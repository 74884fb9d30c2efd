"""
Routine input construction and validation.

Every captured input passes through here before any network call:
text kinds must be non-empty UTF-8, binary kinds must carry a media type,
valid base64 and a payload within the per-kind size limit.
"""

import base64
import binascii
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

from ..config import MIB, Settings, get_settings
from ..exceptions import InputValidationError
from ..models.routine import InputKind, RoutineInput


logger = logging.getLogger(__name__)

SUFFIX_KINDS = {
    ".csv": InputKind.CSV,
    ".txt": InputKind.TEXT,
    ".md": InputKind.TEXT,
    ".pdf": InputKind.PDF,
    ".png": InputKind.IMAGE,
    ".jpg": InputKind.IMAGE,
    ".jpeg": InputKind.IMAGE,
    ".webp": InputKind.IMAGE,
    ".heic": InputKind.IMAGE,
    ".gif": InputKind.IMAGE,
    ".mp4": InputKind.VIDEO,
    ".mov": InputKind.VIDEO,
    ".webm": InputKind.VIDEO,
    ".avi": InputKind.VIDEO,
    ".mkv": InputKind.VIDEO,
}

DEFAULT_MEDIA_TYPES = {
    InputKind.PDF: "application/pdf",
    InputKind.VIDEO: "video/mp4",
}


def infer_kind(filename: str, media_type: Optional[str] = None) -> InputKind:
    """
    Infer the input kind from a file name, falling back to the media type.

    Raises:
        InputValidationError: If neither identifies a supported kind.
    """
    kind = SUFFIX_KINDS.get(Path(filename).suffix.lower())
    if kind is not None:
        return kind

    if media_type:
        if media_type.startswith("image/"):
            return InputKind.IMAGE
        if media_type.startswith("video/"):
            return InputKind.VIDEO
        if media_type == "application/pdf":
            return InputKind.PDF
        if media_type in ("text/csv", "application/vnd.ms-excel"):
            return InputKind.CSV
        if media_type.startswith("text/"):
            return InputKind.TEXT

    raise InputValidationError(
        message=f"Unsupported file type: {filename}",
        reason="unsupported_kind",
        details={"filename": filename, "media_type": media_type},
    )


def _size_limit(kind: InputKind, settings: Settings) -> tuple[int, str]:
    if kind == InputKind.VIDEO:
        return settings.max_video_bytes, "video_too_large"
    return settings.max_document_bytes, "document_too_large"


def _check_size(kind: InputKind, size: int, settings: Settings) -> None:
    limit, reason = _size_limit(kind, settings)
    if size > limit:
        raise InputValidationError(
            message=f"{kind.value} payload of {size} bytes exceeds the {limit} byte limit",
            reason=reason,
            details={"size_bytes": size, "limit_bytes": limit, "limit_mb": limit // MIB},
        )


def validate_routine_input(routine: RoutineInput, settings: Optional[Settings] = None) -> None:
    """
    Reject inputs that must never reach the engine.

    Raises:
        InputValidationError: Empty text, missing media type, bad base64 or
            oversized payload.
    """
    settings = settings or get_settings()

    if not routine.kind.is_binary:
        if not routine.content.strip():
            raise InputValidationError(message="Input text is empty", reason="empty_input")
        return

    if not routine.media_type:
        raise InputValidationError(
            message=f"A media type is required for {routine.kind.value} input",
            reason="missing_media_type",
        )

    # Base64 is 4 chars per 3 bytes; reject before decoding huge payloads
    padding = len(routine.content) - len(routine.content.rstrip("="))
    _check_size(routine.kind, len(routine.content) * 3 // 4 - padding, settings)
    try:
        decoded = base64.b64decode(routine.content, validate=True)
    except (binascii.Error, ValueError):
        raise InputValidationError(message="Binary content is not valid base64", reason="invalid_encoding")
    if not decoded:
        raise InputValidationError(message="Binary content is empty", reason="empty_input")
    _check_size(routine.kind, len(decoded), settings)


def build_routine_input(
    kind: InputKind,
    data: bytes,
    media_type: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> RoutineInput:
    """
    Build a validated RoutineInput from raw bytes.

    Binary kinds are size-checked before encoding. Text kinds are decoded
    as UTF-8 (a byte-order mark is dropped).

    Raises:
        InputValidationError: If the payload cannot be accepted.
    """
    settings = settings or get_settings()

    if kind.is_binary:
        if not data:
            raise InputValidationError(message="Binary content is empty", reason="empty_input")
        _check_size(kind, len(data), settings)
        media_type = media_type or DEFAULT_MEDIA_TYPES.get(kind)
        if not media_type:
            raise InputValidationError(
                message=f"A media type is required for {kind.value} input",
                reason="missing_media_type",
            )
        return RoutineInput(
            kind=kind,
            content=base64.b64encode(data).decode("ascii"),
            media_type=media_type,
        )

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InputValidationError(message="Text input is not valid UTF-8", reason="invalid_encoding")
    routine = RoutineInput(kind=kind, content=text)
    validate_routine_input(routine, settings)
    return routine


def load_routine_input(
    path: Union[str, Path],
    kind: Optional[InputKind] = None,
    settings: Optional[Settings] = None,
) -> RoutineInput:
    """Read a file from disk into a RoutineInput, inferring its kind from the suffix."""
    path = Path(path)
    media_type, _ = mimetypes.guess_type(path.name)
    kind = kind or infer_kind(path.name, media_type)
    logger.debug(f"Loading {path.name} as {kind.value} input")
    return build_routine_input(kind, path.read_bytes(), media_type=media_type, settings=settings)
