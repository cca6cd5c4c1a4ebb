"""
Parsing Module - turns model output into code artifacts.
"""

from dsy_core.ai.parsing.output_parser import (
    MIN_CSS_LENGTH,
    MIN_HTML_LENGTH,
    CodeModification,
    FencedBlock,
    ParsedArtifact,
    build_fallback_files,
    extract_style_tags,
    infer_language,
    looks_like_css,
    looks_like_html,
    parse,
    parse_code_modifications,
    parse_flat,
    parse_multi_file,
    scan_fenced_blocks,
    validate,
)

__all__ = [
    "MIN_CSS_LENGTH",
    "MIN_HTML_LENGTH",
    "CodeModification",
    "FencedBlock",
    "ParsedArtifact",
    "build_fallback_files",
    "extract_style_tags",
    "infer_language",
    "looks_like_css",
    "looks_like_html",
    "parse",
    "parse_code_modifications",
    "parse_flat",
    "parse_multi_file",
    "scan_fenced_blocks",
    "validate",
]
