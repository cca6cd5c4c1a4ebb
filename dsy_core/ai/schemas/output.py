"""
Output shapes shared by the parser, the providers and the router.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict


class OutputMode(str, Enum):
    """Shape of the generated code."""
    FLAT = "flat"              # one HTML document + one stylesheet
    MULTI_FILE = "multi_file"  # several named source files (React/TypeScript)


class Pipeline(str, Enum):
    """Which generation pipeline served a request."""
    FAST_TEXT = "fast_text"
    VISION = "vision"


@dataclass(frozen=True)
class GeneratedFile:
    """A single named source file recovered from model output."""
    name: str
    content: str
    language: str = "plaintext"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ChatTask(str, Enum):
    """Kinds of provider chat requests."""
    EXPLANATION = "explanation"
    CODE = "code"
    SYLLABUS = "syllabus"
    BOX_MODEL = "box_model"
    CODE_REVIEW = "code_review"
