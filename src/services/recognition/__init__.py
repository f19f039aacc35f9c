"""Voice order recognition engine: jargon rewrite, cached extraction,
reference enrichment and per-session draft merging."""

from .merge import merge_fragment
from .pipeline import RecognitionPipeline
from .service import RecognitionService, build_recognition_service, get_recognition_service
from .sessions import SessionRegistry


__all__ = [
    "RecognitionPipeline",
    "RecognitionService",
    "SessionRegistry",
    "build_recognition_service",
    "get_recognition_service",
    "merge_fragment",
]
