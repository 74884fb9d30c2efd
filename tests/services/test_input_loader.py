"""Tests for routine input construction and validation."""

import base64

import pytest

from fitsmart.config import Settings
from fitsmart.exceptions import InputValidationError
from fitsmart.models.routine import InputKind, RoutineInput
from fitsmart.services.input_loader import (
    build_routine_input,
    infer_kind,
    load_routine_input,
    validate_routine_input,
)


@pytest.fixture
def small_limits():
    return Settings(_env_file=None, openai_api_key="sk-test", max_document_bytes=16, max_video_bytes=32)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


class TestInferKind:
    """File kind detection."""

    @pytest.mark.parametrize("filename,kind", [
        ("hevy_export.csv", InputKind.CSV),
        ("rutina.TXT", InputKind.TEXT),
        ("plan.pdf", InputKind.PDF),
        ("captura.jpeg", InputKind.IMAGE),
        ("sentadilla.MOV", InputKind.VIDEO),
    ])
    def test_by_suffix(self, filename, kind):
        assert infer_kind(filename) == kind

    @pytest.mark.parametrize("media_type,kind", [
        ("image/heif", InputKind.IMAGE),
        ("video/3gpp", InputKind.VIDEO),
        ("application/pdf", InputKind.PDF),
        ("text/csv", InputKind.CSV),
        ("text/plain", InputKind.TEXT),
    ])
    def test_falls_back_to_media_type(self, media_type, kind):
        assert infer_kind("blob", media_type) == kind

    def test_unsupported(self):
        with pytest.raises(InputValidationError) as exc_info:
            infer_kind("rutina.xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
        assert exc_info.value.reason == "unsupported_kind"


class TestValidateRoutineInput:
    """Checks applied before any engine call."""

    @pytest.mark.parametrize("kind", [InputKind.TEXT, InputKind.URL, InputKind.CSV])
    def test_blank_text_is_rejected(self, kind, settings):
        with pytest.raises(InputValidationError) as exc_info:
            validate_routine_input(RoutineInput(kind=kind, content="  \n\t"), settings)
        assert exc_info.value.reason == "empty_input"

    def test_text_is_accepted(self, text_input, settings):
        validate_routine_input(text_input, settings)

    def test_binary_requires_media_type(self, settings):
        with pytest.raises(InputValidationError) as exc_info:
            validate_routine_input(RoutineInput(kind=InputKind.IMAGE, content=_b64(b"png")), settings)
        assert exc_info.value.reason == "missing_media_type"

    def test_invalid_base64(self, settings):
        routine = RoutineInput(kind=InputKind.PDF, content="no es base64!!", media_type="application/pdf")
        with pytest.raises(InputValidationError) as exc_info:
            validate_routine_input(routine, settings)
        assert exc_info.value.reason == "invalid_encoding"

    def test_empty_binary(self, settings):
        routine = RoutineInput(kind=InputKind.IMAGE, content="", media_type="image/png")
        with pytest.raises(InputValidationError) as exc_info:
            validate_routine_input(routine, settings)
        assert exc_info.value.reason == "empty_input"

    def test_document_at_limit_is_accepted(self, small_limits):
        routine = RoutineInput(kind=InputKind.IMAGE, content=_b64(b"x" * 16), media_type="image/png")
        validate_routine_input(routine, small_limits)

    def test_document_over_limit(self, small_limits):
        routine = RoutineInput(kind=InputKind.IMAGE, content=_b64(b"x" * 17), media_type="image/png")
        with pytest.raises(InputValidationError) as exc_info:
            validate_routine_input(routine, small_limits)
        assert exc_info.value.reason == "document_too_large"
        assert exc_info.value.details["limit_bytes"] == 16

    def test_video_has_its_own_limit(self, small_limits):
        accepted = RoutineInput(kind=InputKind.VIDEO, content=_b64(b"x" * 30), media_type="video/mp4")
        validate_routine_input(accepted, small_limits)

        rejected = RoutineInput(kind=InputKind.VIDEO, content=_b64(b"x" * 33), media_type="video/mp4")
        with pytest.raises(InputValidationError) as exc_info:
            validate_routine_input(rejected, small_limits)
        assert exc_info.value.reason == "video_too_large"


class TestBuildRoutineInput:
    """Raw bytes to RoutineInput."""

    def test_binary_is_base64_encoded(self, settings):
        routine = build_routine_input(InputKind.IMAGE, b"fake png bytes", media_type="image/png", settings=settings)
        assert routine.content == "ZmFrZSBwbmcgYnl0ZXM="
        assert routine.media_type == "image/png"

    def test_default_media_types(self, settings):
        assert build_routine_input(InputKind.PDF, b"%PDF-1.4", settings=settings).media_type == "application/pdf"
        assert build_routine_input(InputKind.VIDEO, b"mp4", settings=settings).media_type == "video/mp4"

    def test_image_without_media_type(self, settings):
        with pytest.raises(InputValidationError) as exc_info:
            build_routine_input(InputKind.IMAGE, b"png", settings=settings)
        assert exc_info.value.reason == "missing_media_type"

    def test_oversized_binary_is_rejected_before_encoding(self, small_limits):
        with pytest.raises(InputValidationError) as exc_info:
            build_routine_input(InputKind.VIDEO, b"x" * 33, settings=small_limits)
        assert exc_info.value.details["size_bytes"] == 33

    def test_text_drops_byte_order_mark(self, settings):
        routine = build_routine_input(InputKind.CSV, "\ufefftitle,start_time\n".encode("utf-8"), settings=settings)
        assert routine.content == "title,start_time\n"

    def test_invalid_utf8(self, settings):
        with pytest.raises(InputValidationError) as exc_info:
            build_routine_input(InputKind.TEXT, b"\xff\xfe\xfa", settings=settings)
        assert exc_info.value.reason == "invalid_encoding"

    def test_empty_text(self, settings):
        with pytest.raises(InputValidationError):
            build_routine_input(InputKind.TEXT, b"", settings=settings)


class TestLoadRoutineInput:
    def test_reads_csv_from_disk(self, tmp_path, hevy_csv, settings):
        path = tmp_path / "workouts.csv"
        path.write_text(hevy_csv, encoding="utf-8")

        routine = load_routine_input(path, settings=settings)

        assert routine.kind == InputKind.CSV
        assert routine.content == hevy_csv

    def test_reads_pdf_from_disk(self, tmp_path, settings):
        path = tmp_path / "plan.pdf"
        path.write_bytes(b"%PDF-1.4 rutina")

        routine = load_routine_input(path, settings=settings)

        assert routine.kind == InputKind.PDF
        assert routine.media_type == "application/pdf"
        assert base64.b64decode(routine.content) == b"%PDF-1.4 rutina"

    def test_explicit_kind_wins(self, tmp_path, settings):
        path = tmp_path / "notes.csv"
        path.write_text("Lunes: sentadilla", encoding="utf-8")
        assert load_routine_input(path, kind=InputKind.TEXT, settings=settings).kind == InputKind.TEXT
