"""Local language-model adapters used for optional text enrichment."""

from .describer import Describer, SubjectKind, TextGenerationRequest, clean_response
from .runner import LLMRequest, LLMRunner

__all__ = [
    "Describer",
    "LLMRequest",
    "LLMRunner",
    "SubjectKind",
    "TextGenerationRequest",
    "clean_response",
]
