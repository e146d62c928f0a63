from src.pipeline.orchestrator import (
    AnalyzeResponse,
    PipelineRun,
    RecommendationOrchestrator,
    RequestState,
    build_orchestrator,
)

__all__ = [
    "AnalyzeResponse",
    "PipelineRun",
    "RecommendationOrchestrator",
    "RequestState",
    "build_orchestrator",
]
