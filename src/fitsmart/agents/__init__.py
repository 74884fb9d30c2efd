"""Reasoning engine stage agents."""

from .analysis_gateway import AnalysisGateway, AnalysisStage, build_stage_configs

__all__ = [
    "AnalysisGateway",
    "AnalysisStage",
    "build_stage_configs",
]
