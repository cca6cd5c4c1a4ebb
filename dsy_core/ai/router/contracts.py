"""
Contracts for the Generation Router.

Dataclasses for generation results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dsy_core.ai.providers.base import ProviderType
from dsy_core.ai.schemas.design_spec import DesignSpec
from dsy_core.ai.schemas.output import GeneratedFile, OutputMode, Pipeline


@dataclass
class GenerationResult:
    """
    Result of one generate call, in flat or multi-file shape.

    Superseded by the next call, never mutated after it is returned.
    """

    success: bool
    """Whether a validated artifact was produced."""

    mode: OutputMode = OutputMode.FLAT
    """Which shape the artifact has."""

    pipeline: Pipeline = Pipeline.FAST_TEXT
    """Which pipeline served the request."""

    provider: Optional[ProviderType] = None
    """Provider that produced the raw output."""

    html: str = ""
    """Flat mode: the HTML document."""

    css: str = ""
    """Flat mode: the stylesheet."""

    files: List[GeneratedFile] = field(default_factory=list)
    """Multi-file mode: ordered source files."""

    error: Optional[str] = None
    """Human-readable error when success is False."""

    raw_output: str = ""
    """Last raw model output, kept even on failure."""

    attempts: int = 0
    """Provider attempts made."""

    design_spec: Optional[DesignSpec] = None
    """The design spec actually sent to the provider."""

    used_preprocessor: bool = False
    """Whether image pre-processing succeeded for this request."""

    fallback: bool = False
    """Multi-file mode: files were synthesized from a flat HTML/CSS pair."""

    latency_ms: float = 0.0
    """Total wall time including retries."""

    model: str = ""
    """Model that produced the raw output."""

    def describe(self) -> str:
        """Human-readable description."""
        status = "SUCCESS" if self.success else "FAILED"
        lines = [
            f"GenerationResult: {status}",
            f"  Mode: {self.mode.value}",
            f"  Pipeline: {self.pipeline.value}",
            f"  Provider: {self.provider.value if self.provider else 'none'}",
            f"  Attempts: {self.attempts}",
            f"  Latency: {self.latency_ms:.0f}ms",
        ]
        if self.error:
            lines.append(f"  Error: {self.error}")
        if self.mode == OutputMode.FLAT:
            lines.append(f"  HTML length: {len(self.html)} chars")
            lines.append(f"  CSS length: {len(self.css)} chars")
        else:
            lines.append(f"  Files: {', '.join(f.name for f in self.files) or 'none'}")
            if self.fallback:
                lines.append("  Fallback: synthesized from flat output")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "mode": self.mode.value,
            "pipeline": self.pipeline.value,
            "provider": self.provider.value if self.provider else None,
            "model": self.model,
            "error": self.error,
            "raw_output": self.raw_output,
            "attempts": self.attempts,
            "design_spec": self.design_spec.to_wire() if self.design_spec else None,
            "used_preprocessor": self.used_preprocessor,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.mode == OutputMode.FLAT:
            data.update(html=self.html, css=self.css)
        else:
            data.update(files=[f.to_dict() for f in self.files], fallback=self.fallback)
        return data
