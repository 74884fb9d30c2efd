"""
Session flow controller.

Owns the state of one audit session and is the single place where it
changes. The standard branch runs

    CapturingInput -> SelectingPersona -> PreAnalyzing -> AnsweringProfile
        -> DeepAnalyzing -> ShowingResults

and video input branches off as

    CapturingInput -> AnalyzingVideo -> ShowingVideoResults

Each stage is a frozen dataclass carrying exactly the data valid there.
Only one engine call may be pending per session (the busy flag). Reset is
legal from every stage and starts a new generation; a stage call that
resolves under an older generation is discarded.

Stage failures never propagate: they are logged, stored as a localized
message and rolled back. Calling an operation from the wrong stage, or
while busy, raises FlowTransitionError / FlowBusyError. A cancelled engine
call is rolled back the same way and the cancellation is re-raised.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, Union

from ..agents.analysis_gateway import AnalysisGateway
from ..analysis.csv_normalizer import import_workout_csv, serialize_for_transmission
from ..config import Settings, get_settings
from ..exceptions import (
    CsvUnmappableError,
    FitSmartError,
    FlowBusyError,
    FlowTransitionError,
    InputValidationError,
    ProfileValidationError,
)
from ..messages import get_message
from ..models.analysis import BiomechanicalAnalysis, PreAnalysisResult, VideoAnalysisResult
from ..models.profile import ProfileDraft, UserProfile, validate_profile
from ..models.routine import InputKind, PersonaId, RoutineInput, UploadTab
from ..models.workouts import WorkoutSession
from .input_loader import build_routine_input, infer_kind, validate_routine_input


logger = logging.getLogger(__name__)

Sessions = Tuple[WorkoutSession, ...]


# ============================================================================
# Stages
# ============================================================================

@dataclass(frozen=True)
class CapturingInput:
    upload_tab: UploadTab = UploadTab.APP


@dataclass(frozen=True)
class SelectingPersona:
    input: RoutineInput
    workout_sessions: Sessions = ()


@dataclass(frozen=True)
class PreAnalyzing:
    input: RoutineInput
    persona: PersonaId
    workout_sessions: Sessions = ()


@dataclass(frozen=True)
class AnsweringProfile:
    """Waiting for the profile. ``draft`` is the last submission, kept on failure."""
    input: RoutineInput
    persona: PersonaId
    pre_analysis: PreAnalysisResult
    workout_sessions: Sessions = ()
    draft: Optional[ProfileDraft] = None


@dataclass(frozen=True)
class DeepAnalyzing:
    input: RoutineInput
    persona: PersonaId
    pre_analysis: PreAnalysisResult
    profile: UserProfile
    draft: ProfileDraft
    workout_sessions: Sessions = ()


@dataclass(frozen=True)
class ShowingResults:
    input: RoutineInput
    persona: PersonaId
    pre_analysis: PreAnalysisResult
    profile: UserProfile
    analysis: BiomechanicalAnalysis
    workout_sessions: Sessions = ()


@dataclass(frozen=True)
class AnalyzingVideo:
    input: RoutineInput


@dataclass(frozen=True)
class ShowingVideoResults:
    input: RoutineInput
    result: VideoAnalysisResult


FlowStage = Union[
    CapturingInput,
    SelectingPersona,
    PreAnalyzing,
    AnsweringProfile,
    DeepAnalyzing,
    ShowingResults,
    AnalyzingVideo,
    ShowingVideoResults,
]

STAGE_NAMES = {
    CapturingInput: "capturing_input",
    SelectingPersona: "selecting_persona",
    PreAnalyzing: "pre_analyzing",
    AnsweringProfile: "answering_profile",
    DeepAnalyzing: "deep_analyzing",
    ShowingResults: "showing_results",
    AnalyzingVideo: "analyzing_video",
    ShowingVideoResults: "showing_video_results",
}


def stage_name(stage: FlowStage) -> str:
    return STAGE_NAMES[type(stage)]


# ============================================================================
# Controller
# ============================================================================

class FlowController:
    """
    State machine for one audit session.

    Args:
        gateway: Analysis gateway used for the engine stages
        settings: Application settings (cached settings if omitted)
        locale: Locale for user-facing messages (settings.locale if omitted)
    """

    def __init__(
        self,
        gateway: AnalysisGateway,
        settings: Optional[Settings] = None,
        locale: Optional[str] = None,
    ):
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.locale = locale or self.settings.locale
        self._stage: FlowStage = CapturingInput()
        self._busy = False
        self._error: Optional[str] = None
        self._generation = 0

    @property
    def stage(self) -> FlowStage:
        return self._stage

    @property
    def stage_name(self) -> str:
        return stage_name(self._stage)

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Guards and error handling
    # ------------------------------------------------------------------

    def _require(self, operation: str, *stage_types: Type) -> Any:
        if self._busy:
            raise FlowBusyError(stage=self.stage_name)
        if not isinstance(self._stage, stage_types):
            raise FlowTransitionError(operation=operation, stage=self.stage_name)
        return self._stage

    def _localize(self, error: BaseException, fallback_key: str) -> str:
        if isinstance(error, InputValidationError):
            return get_message(error.reason, self.locale, **error.details)
        if isinstance(error, CsvUnmappableError):
            return get_message("csv_unmappable", self.locale)
        return get_message(fallback_key, self.locale)

    def _record_failure(self, error: Exception, fallback_key: str) -> None:
        if isinstance(error, FitSmartError):
            logger.warning(f"Flow step failed in {self.stage_name}: {error!r}", exc_info=error)
        else:
            logger.error(f"Unexpected error in {self.stage_name}: {error}", exc_info=error)
        self._error = self._localize(error, fallback_key)

    async def _run_stage(
        self,
        call: Callable[[], Awaitable[Any]],
        on_success: Callable[[Any], FlowStage],
        on_failure: Callable[[], FlowStage],
        failure_key: str,
    ) -> FlowStage:
        """Await one engine call under the busy flag and apply its outcome."""
        generation = self._generation
        self._busy = True
        self._error = None
        try:
            result = await call()
        except asyncio.CancelledError:
            if generation == self._generation:
                logger.warning(f"Engine call cancelled in {self.stage_name}, rolling back")
                self._busy = False
                self._error = get_message(failure_key, self.locale)
                self._stage = on_failure()
            raise
        except Exception as e:
            if generation != self._generation:
                logger.info(f"Discarding failure from superseded generation {generation}: {e!r}")
                return self._stage
            self._busy = False
            self._record_failure(e, failure_key)
            self._stage = on_failure()
            return self._stage

        if generation != self._generation:
            logger.info(f"Discarding result from superseded generation {generation}")
            return self._stage
        self._busy = False
        self._stage = on_success(result)
        return self._stage

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def capture_input(self, routine: RoutineInput) -> FlowStage:
        """
        Accept a routine input.

        Video input runs the video stage immediately; every other kind moves
        to persona selection. CSV exports are normalized into the compact
        history text first. Invalid input stays in CapturingInput with an
        error message.
        """
        self._require("capture input", CapturingInput)
        self._error = None

        sessions: Sessions = ()
        try:
            validate_routine_input(routine, self.settings)
            if routine.kind == InputKind.CSV:
                routine, sessions = self._normalize_csv(routine)
        except FitSmartError as e:
            self._record_failure(e, "unexpected_error")
            return self._stage

        if routine.kind == InputKind.VIDEO:
            return await self._analyze_video(routine)

        self._stage = SelectingPersona(input=routine, workout_sessions=sessions)
        return self._stage

    async def capture_file(
        self,
        filename: str,
        data: bytes,
        kind: Optional[InputKind] = None,
        media_type: Optional[str] = None,
    ) -> FlowStage:
        """Build a routine input from an uploaded file and capture it."""
        self._require("capture input", CapturingInput)
        try:
            kind = kind or infer_kind(filename, media_type)
            routine = build_routine_input(kind, data, media_type=media_type, settings=self.settings)
        except FitSmartError as e:
            self._record_failure(e, "unexpected_error")
            return self._stage
        return await self.capture_input(routine)

    def _normalize_csv(self, routine: RoutineInput) -> Tuple[RoutineInput, Sessions]:
        imported = import_workout_csv(routine.content)
        if not imported.sessions:
            raise InputValidationError(message="CSV export contains no sessions", reason="csv_empty")
        logger.info(
            f"Imported {len(imported.sessions)} sessions ({imported.total_sets} sets) "
            f"from {imported.vendor.value} export"
        )
        text = serialize_for_transmission(imported.sessions, self.settings.max_serialized_sessions)
        return RoutineInput(kind=InputKind.CSV, content=text), tuple(imported.sessions)

    async def _analyze_video(self, routine: RoutineInput) -> FlowStage:
        self._stage = AnalyzingVideo(input=routine)
        return await self._run_stage(
            lambda: self.gateway.analyze_video(routine.content, routine.media_type or "video/mp4"),
            on_success=lambda result: ShowingVideoResults(input=routine, result=result),
            on_failure=lambda: CapturingInput(upload_tab=UploadTab.VIDEO),
            failure_key="video_analysis_failed",
        )

    async def select_persona(self, persona: PersonaId) -> FlowStage:
        """Choose the auditor persona and run the pre-analysis."""
        current: SelectingPersona = self._require("select persona", SelectingPersona)
        persona = PersonaId(persona)
        self._stage = PreAnalyzing(
            input=current.input,
            persona=persona,
            workout_sessions=current.workout_sessions,
        )
        return await self._run_stage(
            lambda: self.gateway.pre_analyze(current.input, persona),
            on_success=lambda pre: AnsweringProfile(
                input=current.input,
                persona=persona,
                pre_analysis=pre,
                workout_sessions=current.workout_sessions,
            ),
            on_failure=lambda: CapturingInput(),
            failure_key="pre_analysis_failed",
        )

    def profile_defaults(self) -> ProfileDraft:
        """Draft to prefill the questionnaire: the last submission, or pre-analysis defaults."""
        current: AnsweringProfile = self._require("read profile defaults", AnsweringProfile)
        if current.draft is not None:
            return current.draft
        return ProfileDraft.from_pre_analysis(current.pre_analysis)

    async def submit_profile(self, draft: ProfileDraft) -> FlowStage:
        """
        Submit the profile and run the deep analysis.

        Raises:
            ProfileValidationError: If required fields do not validate.
                Nothing is sent and the stage does not change.
        """
        current: AnsweringProfile = self._require("submit profile", AnsweringProfile)
        problems = validate_profile(draft)
        if problems:
            raise ProfileValidationError(problems, message=get_message("profile_incomplete", self.locale))

        profile = draft.finalize(current.persona)
        self._stage = DeepAnalyzing(
            input=current.input,
            persona=current.persona,
            pre_analysis=current.pre_analysis,
            profile=profile,
            draft=draft,
            workout_sessions=current.workout_sessions,
        )
        return await self._run_stage(
            lambda: self.gateway.analyze_deep(profile, current.input, current.pre_analysis),
            on_success=lambda analysis: ShowingResults(
                input=current.input,
                persona=current.persona,
                pre_analysis=current.pre_analysis,
                profile=profile,
                analysis=analysis,
                workout_sessions=current.workout_sessions,
            ),
            on_failure=lambda: AnsweringProfile(
                input=current.input,
                persona=current.persona,
                pre_analysis=current.pre_analysis,
                workout_sessions=current.workout_sessions,
                draft=draft,
            ),
            failure_key="deep_analysis_failed",
        )

    def reset(self) -> FlowStage:
        """Return to the initial state from any stage, superseding pending calls."""
        self._generation += 1
        self._busy = False
        self._error = None
        self._stage = CapturingInput()
        return self._stage

    def restart_video(self) -> FlowStage:
        """Leave a finished video analysis for a fresh video capture."""
        self._require("restart video", ShowingVideoResults)
        self._generation += 1
        self._error = None
        self._stage = CapturingInput(upload_tab=UploadTab.VIDEO)
        return self._stage
