"""Tests for profile drafting and validation."""

import pytest
from pydantic import ValidationError

from fitsmart.models.analysis import (
    ExerciseType,
    FeedbackType,
    PreAnalysisResult,
    SetupStatus,
    TrainingType,
)
from fitsmart.models.profile import DEFAULT_AGE, ProfileDraft, UserProfile, validate_profile
from fitsmart.models.routine import PERSONAS, InputKind, PersonaId, list_personas


@pytest.fixture
def complete_draft():
    return ProfileDraft(
        goal="Resistencia",
        training_type="Calistenia",
        age=41,
        custom_answer="Hago dominadas cada día",
    )


class TestValidateProfile:
    """Submission gate."""

    def test_complete_draft(self, complete_draft):
        assert validate_profile(complete_draft) == []

    def test_empty_draft_reports_every_field(self):
        assert validate_profile(ProfileDraft()) == ["goal", "trainingType", "age", "customAnswer"]

    @pytest.mark.parametrize("answer,valid", [
        ("sí", False),
        ("   abc   ", False),
        ("abcd", True),
        ("  no sé ", True),
    ])
    def test_custom_answer_length_after_trim(self, complete_draft, answer, valid):
        problems = validate_profile(complete_draft.model_copy(update={"custom_answer": answer}))
        assert ("customAnswer" not in problems) is valid

    def test_negative_age(self, complete_draft):
        assert validate_profile(complete_draft.model_copy(update={"age": -3})) == ["age"]

    def test_injuries_are_optional(self, complete_draft):
        assert complete_draft.injuries == ""
        assert validate_profile(complete_draft) == []


class TestProfileDraft:
    """Defaults and finalization."""

    def test_defaults_from_pre_analysis(self, pre_analysis):
        draft = ProfileDraft.from_pre_analysis(pre_analysis)
        assert draft.goal == "Hipertrofia (Ganancia Muscular)"
        assert draft.training_type == TrainingType.WEIGHTS.value
        assert draft.age == DEFAULT_AGE
        assert draft.custom_answer == ""

    def test_undefined_training_type_falls_back(self, pre_analysis_payload):
        pre_analysis_payload["detectedTrainingType"] = "Yoga aéreo"
        pre_analysis_payload["detectedGoalGuess"] = "Movilidad y Salud"
        pre = PreAnalysisResult.model_validate(pre_analysis_payload)

        draft = ProfileDraft.from_pre_analysis(pre)

        assert pre.detected_training_type == TrainingType.UNDEFINED
        assert draft.training_type == TrainingType.WEIGHTS.value
        assert draft.goal == "Movilidad y Salud"

    def test_defaults_without_pre_analysis(self):
        draft = ProfileDraft.from_pre_analysis(None)
        assert draft.goal == "Hipertrofia (Ganancia Muscular)"

    def test_finalize_trims_and_binds_persona(self, complete_draft):
        draft = complete_draft.model_copy(update={"goal": "  Resistencia ", "injuries": " rodilla "})

        profile = draft.finalize(PersonaId.TODOR)

        assert profile == UserProfile(
            goal="Resistencia",
            training_type="Calistenia",
            experience="Intermedio (1-3 años)",
            age=41,
            gender="Masculino",
            injuries="rodilla",
            custom_answer="Hago dominadas cada día",
            persona=PersonaId.TODOR,
        )

    def test_profile_is_immutable(self, complete_draft):
        profile = complete_draft.finalize(PersonaId.SARA)
        with pytest.raises(ValidationError):
            profile.age = 50

    def test_camel_case_payload(self):
        draft = ProfileDraft.model_validate({"trainingType": "Powerlifting", "customAnswer": "Me estanco"})
        assert draft.training_type == "Powerlifting"
        assert draft.custom_answer == "Me estanco"


class TestEngineModels:
    """Tolerant parsing of engine enums."""

    def test_exercise_type_accepts_english(self):
        assert ExerciseType("compound") == ExerciseType.COMPOUND
        assert ExerciseType("AISLAMIENTO") == ExerciseType.ISOLATION

    def test_setup_status_case(self):
        assert SetupStatus("attention") == SetupStatus.ATTENTION

    def test_feedback_type_case(self):
        assert FeedbackType("Correction") == FeedbackType.CORRECTION

    def test_training_type_by_member_name(self, pre_analysis_payload):
        pre_analysis_payload["detectedTrainingType"] = "powerlifting"
        pre = PreAnalysisResult.model_validate(pre_analysis_payload)
        assert pre.detected_training_type == TrainingType.POWERLIFTING

    def test_blank_question_is_rejected(self, pre_analysis_payload):
        pre_analysis_payload["specificQuestion"] = "  "
        with pytest.raises(ValidationError):
            PreAnalysisResult.model_validate(pre_analysis_payload)

    def test_confidence_bounds(self, pre_analysis_payload):
        pre_analysis_payload["confidenceScore"] = 101
        with pytest.raises(ValidationError):
            PreAnalysisResult.model_validate(pre_analysis_payload)


class TestRoutineModels:
    def test_binary_kinds(self):
        assert {k for k in InputKind if k.is_binary} == {InputKind.IMAGE, InputKind.PDF, InputKind.VIDEO}

    def test_persona_catalogue_order(self):
        assert [p.id for p in list_personas()] == [PersonaId.SARA, PersonaId.TODOR, PersonaId.RAUL]
        assert PERSONAS[PersonaId.RAUL].loading_message == "¡MOTIVANDO A LA IA!"
