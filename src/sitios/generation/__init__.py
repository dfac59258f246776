"""Generation runs: the output generator, the source runner and the session lifecycle."""

from sitios.generation.exceptions import (
    FinalizationError,
    GenerationError,
    GeneratorNotInitializedError,
    InitializationError,
    PagePathError,
    PostprocessError,
    SessionStateError,
    SourceFailedError,
    StaticCopyError,
    UnknownPostprocessorError,
)
from sitios.generation.generator import ERROR_PAGE_HOOK, SiteGenerator
from sitios.generation.runner import SourceRunner
from sitios.generation.session import GenerationSession, SessionState, generate

__all__ = [
    "ERROR_PAGE_HOOK",
    "FinalizationError",
    "GenerationError",
    "GenerationSession",
    "GeneratorNotInitializedError",
    "InitializationError",
    "PagePathError",
    "PostprocessError",
    "SessionState",
    "SessionStateError",
    "SiteGenerator",
    "SourceFailedError",
    "SourceRunner",
    "StaticCopyError",
    "UnknownPostprocessorError",
    "generate",
]
