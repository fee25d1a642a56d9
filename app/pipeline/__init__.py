from app.pipeline.models import AnchorStatus, UploadRequest, UploadResult
from app.pipeline.orchestrator import PipelineOrchestrator, build_orchestrator

__all__ = [
    "AnchorStatus",
    "PipelineOrchestrator",
    "UploadRequest",
    "UploadResult",
    "build_orchestrator",
]
