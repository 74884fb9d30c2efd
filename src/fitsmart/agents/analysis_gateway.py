"""
Analysis Gateway.

Builds the stage-specific requests for the reasoning engine and turns its
replies into typed results:

1. pre_analyze: persona-voiced classification and one follow-up question
2. analyze_deep: scored biomechanical audit of the routine or history
3. analyze_video: rep counting and technique judgement of a lift video

Every stage fails with EmptyResponseError when the engine returns no text,
before any decoding is attempted. Decoding and schema validation go
through the structured response decoder. Nothing here retries.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from ..config import Settings, get_settings
from ..exceptions import EmptyResponseError, InputValidationError
from ..llm.decoder import decode_model
from ..llm.prompts import (
    PRE_ANALYSIS_CONTEXT,
    USER_CONTENT_PREFIX,
    VIDEO_ANALYSIS_USER,
    VISUAL_CONTENT_DIRECTIVE,
    build_deep_analysis_system,
    build_pre_analysis_system,
    build_user_context,
    build_video_analysis_system,
)
from ..llm.providers import (
    ContentPart,
    EngineRequest,
    MediaPart,
    ReasoningEngine,
    ResponseFormat,
    StageConfig,
    TextPart,
    get_engine,
)
from ..models.analysis import BiomechanicalAnalysis, PreAnalysisResult, VideoAnalysisResult
from ..models.profile import UserProfile
from ..models.routine import PersonaId, RoutineInput


logger = logging.getLogger(__name__)


class AnalysisStage(str, Enum):
    """Reasoning engine stages. Values name the stage in error messages."""
    PRE_ANALYSIS = "pre-analysis"
    DEEP_ANALYSIS = "analysis"
    VIDEO_ANALYSIS = "video analysis"


def build_stage_configs(settings: Optional[Settings] = None) -> Dict[AnalysisStage, StageConfig]:
    """Per-stage model, output budget and timeout from settings."""
    settings = settings or get_settings()
    fast, smart, vision = settings.stage_models()
    return {
        AnalysisStage.PRE_ANALYSIS: StageConfig(
            model=fast,
            max_output_tokens=settings.pre_analysis_max_tokens,
            timeout=settings.pre_analysis_timeout,
        ),
        AnalysisStage.DEEP_ANALYSIS: StageConfig(
            model=smart,
            max_output_tokens=settings.deep_analysis_max_tokens,
            timeout=settings.deep_analysis_timeout,
            thinking_budget=settings.deep_analysis_thinking_budget,
        ),
        AnalysisStage.VIDEO_ANALYSIS: StageConfig(
            model=vision,
            max_output_tokens=settings.video_analysis_max_tokens,
            timeout=settings.video_analysis_timeout,
        ),
    }


def _media_part(routine: RoutineInput) -> MediaPart:
    if not routine.media_type:
        raise InputValidationError(
            message=f"A media type is required for {routine.kind.value} input",
            reason="missing_media_type",
        )
    return MediaPart(media_type=routine.media_type, data=routine.content)


class AnalysisGateway:
    """
    Stateless request builder and stage runner.

    Args:
        engine: Reasoning engine (the configured singleton if omitted)
        stage_configs: Per-stage configuration (built from settings if omitted)
    """

    def __init__(
        self,
        engine: Optional[ReasoningEngine] = None,
        stage_configs: Optional[Dict[AnalysisStage, StageConfig]] = None,
    ):
        self._engine = engine
        self.stage_configs = stage_configs or build_stage_configs()

    @property
    def engine(self) -> ReasoningEngine:
        """Lazy-load the engine."""
        if self._engine is None:
            self._engine = get_engine()
        return self._engine

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def build_pre_analysis_request(self, routine: RoutineInput, persona: PersonaId) -> EngineRequest:
        if routine.kind.is_binary:
            content: List[ContentPart] = [_media_part(routine), TextPart(VISUAL_CONTENT_DIRECTIVE)]
        else:
            content = [TextPart(f"{USER_CONTENT_PREFIX}{routine.content}")]

        return EngineRequest(
            system_instruction=build_pre_analysis_system(persona, routine.kind),
            content=tuple(content),
            response_format=ResponseFormat.JSON,
            max_output_size=self.stage_configs[AnalysisStage.PRE_ANALYSIS].max_output_tokens,
        )

    def build_deep_analysis_request(
        self,
        profile: UserProfile,
        routine: RoutineInput,
        pre_analysis: Optional[PreAnalysisResult] = None,
    ) -> EngineRequest:
        content: List[ContentPart] = []
        if routine.kind.is_binary:
            content.append(_media_part(routine))
        else:
            content.append(TextPart(routine.content))

        if pre_analysis is not None:
            content.append(TextPart(PRE_ANALYSIS_CONTEXT.format(
                training_type=pre_analysis.detected_training_type.value,
                observation=pre_analysis.summary_observation,
                question=pre_analysis.specific_question,
            )))
        content.append(TextPart(build_user_context(profile)))

        return EngineRequest(
            system_instruction=build_deep_analysis_system(profile),
            content=tuple(content),
            response_format=ResponseFormat.JSON,
            max_output_size=self.stage_configs[AnalysisStage.DEEP_ANALYSIS].max_output_tokens,
        )

    def build_video_analysis_request(self, media_b64: str, media_type: str) -> EngineRequest:
        return EngineRequest(
            system_instruction=build_video_analysis_system(),
            content=(
                MediaPart(media_type=media_type, data=media_b64),
                TextPart(VIDEO_ANALYSIS_USER),
            ),
            response_format=ResponseFormat.JSON,
            max_output_size=self.stage_configs[AnalysisStage.VIDEO_ANALYSIS].max_output_tokens,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def pre_analyze(self, routine: RoutineInput, persona: PersonaId) -> PreAnalysisResult:
        """
        Classify the input and generate the follow-up question.

        Raises:
            LLMError: Engine failure, empty response, decode or schema failure
            InputValidationError: Binary input without a media type
        """
        request = self.build_pre_analysis_request(routine, persona)
        return await self._run(AnalysisStage.PRE_ANALYSIS, request, PreAnalysisResult)

    async def analyze_deep(
        self,
        profile: UserProfile,
        routine: RoutineInput,
        pre_analysis: Optional[PreAnalysisResult] = None,
    ) -> BiomechanicalAnalysis:
        """
        Run the full audit for a submitted profile.

        Raises:
            LLMError: Engine failure, empty response, decode or schema failure
        """
        request = self.build_deep_analysis_request(profile, routine, pre_analysis)
        return await self._run(AnalysisStage.DEEP_ANALYSIS, request, BiomechanicalAnalysis)

    async def analyze_video(self, media_b64: str, media_type: str) -> VideoAnalysisResult:
        """
        Count reps and judge technique in a lift video.

        Raises:
            LLMError: Engine failure, empty response, decode or schema failure
        """
        request = self.build_video_analysis_request(media_b64, media_type)
        return await self._run(AnalysisStage.VIDEO_ANALYSIS, request, VideoAnalysisResult)

    async def _run(self, stage: AnalysisStage, request: EngineRequest, model):
        config = self.stage_configs[stage]
        logger.info(f"Running {stage.value} with model {config.model}")

        response = await self.engine.generate(request, config)
        if not response.text or not response.text.strip():
            raise EmptyResponseError(stage=stage.value)

        return decode_model(response.text, model, stage=stage.value)
