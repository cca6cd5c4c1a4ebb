"""
Output Parser - recovers code artifacts from free-text model output.

Models rarely answer exactly as instructed: tags go missing, fences get
nested, styles end up inline. Extraction is therefore an ordered chain of
strategies, each only filling the slots the previous ones left empty:

    fenced-tagged   ```html / ```css blocks, first match per slot wins
    fenced-sniffed  untagged blocks classified by their structure
    raw-document    a bare <!DOCTYPE html>...</html> or <html>...</html> span
    style-tags      <style> contents of the recovered HTML, as CSS

Multi-file output uses `---FILE: <path>---` markers instead.

Everything here is a pure function of the input text.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, Doctype

from dsy_core.ai.schemas.output import GeneratedFile, OutputMode

logger = logging.getLogger("dsy.ai.parser")

MIN_HTML_LENGTH = 100
MIN_CSS_LENGTH = 50

_FENCE_RE = re.compile(
    r"```[ \t]*([A-Za-z0-9_+-]*)(?::([^\s`]+))?[ \t]*\n?(.*?)```",
    re.DOTALL,
)
_CSS_SELECTOR_RE = re.compile(r"[.#\w-]+\s*\{")
_RAW_DOCTYPE_RE = re.compile(r"<!DOCTYPE\s+html[^>]*>.*?</html>", re.IGNORECASE | re.DOTALL)
_RAW_HTML_RE = re.compile(r"<html[^>]*>.*?</html>", re.IGNORECASE | re.DOTALL)
_HTML_SNIFF_MARKERS = ("<!doctype", "<html", "<head", "<body")

_FILE_MARKER_RE = re.compile(r"^[ \t]*---[ \t]*FILE:[ \t]*(.+?)[ \t]*---[ \t]*$", re.MULTILINE)
_END_MARKER_RE = re.compile(r"^[ \t]*---[ \t]*END[ \t]*---[ \t]*$", re.MULTILINE)

_EXTENSION_LANGUAGES = {
    "tsx": "typescript",
    "ts": "typescript",
    "jsx": "javascript",
    "js": "javascript",
    "mjs": "javascript",
    "css": "css",
    "scss": "scss",
    "html": "html",
    "htm": "html",
    "json": "json",
    "md": "markdown",
}


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FencedBlock:
    """One triple-backtick block: ```lang[:filename] ... ```."""
    language: str
    filename: Optional[str]
    body: str
    start: int


@dataclass
class ParsedArtifact:
    """
    What the parser recovered from one model response.

    Flat mode fills `html`/`css`; multi-file mode fills `files`.
    `strategies` lists the extraction steps that contributed, in order.
    """
    mode: OutputMode
    html: str = ""
    css: str = ""
    files: List[GeneratedFile] = field(default_factory=list)
    strategies: List[str] = field(default_factory=list)

    @property
    def error(self) -> Optional[str]:
        return validate(self)

    @property
    def is_valid(self) -> bool:
        return validate(self) is None


@dataclass(frozen=True)
class CodeModification:
    """Whole-file replacements proposed by the code assistant."""
    html: Optional[str] = None
    css: Optional[str] = None

    @property
    def has_changes(self) -> bool:
        return self.html is not None or self.css is not None


# ---------------------------------------------------------------------------
# SCANNING
# ---------------------------------------------------------------------------


def scan_fenced_blocks(raw_text: str) -> List[FencedBlock]:
    """All fenced blocks in order of appearance, bodies trimmed."""
    blocks = []
    for match in _FENCE_RE.finditer(raw_text or ""):
        language, filename, body = match.groups()
        blocks.append(
            FencedBlock(
                language=(language or "").lower(),
                filename=filename,
                body=body.strip(),
                start=match.start(),
            )
        )
    return blocks


def looks_like_html(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in _HTML_SNIFF_MARKERS)


def looks_like_css(text: str) -> bool:
    """Balanced braces, a declaration character and a selector before `{`."""
    opens = text.count("{")
    if opens == 0 or opens != text.count("}"):
        return False
    if ":" not in text and ";" not in text:
        return False
    return bool(_CSS_SELECTOR_RE.search(text))


# ---------------------------------------------------------------------------
# FLAT STRATEGIES
# ---------------------------------------------------------------------------
# Each strategy proposes values for the slots it can fill. The chain keeps
# the first proposal per slot.

Strategy = Callable[[str, List[FencedBlock], Dict[str, str]], Dict[str, str]]


def _from_tagged_blocks(raw_text: str, blocks: List[FencedBlock], found: Dict[str, str]) -> Dict[str, str]:
    proposals: Dict[str, str] = {}
    for block in blocks:
        if block.language in ("html", "css") and block.language not in proposals and block.body:
            proposals[block.language] = block.body
    return proposals


def _from_untagged_blocks(raw_text: str, blocks: List[FencedBlock], found: Dict[str, str]) -> Dict[str, str]:
    proposals: Dict[str, str] = {}
    for block in blocks:
        if block.language or not block.body:
            continue
        if looks_like_html(block.body):
            proposals.setdefault("html", block.body)
        elif looks_like_css(block.body):
            proposals.setdefault("css", block.body)
    return proposals


def _from_raw_document(raw_text: str, blocks: List[FencedBlock], found: Dict[str, str]) -> Dict[str, str]:
    if "html" in found:
        return {}
    match = _RAW_DOCTYPE_RE.search(raw_text) or _RAW_HTML_RE.search(raw_text)
    return {"html": match.group(0).strip()} if match else {}


def _from_style_tags(raw_text: str, blocks: List[FencedBlock], found: Dict[str, str]) -> Dict[str, str]:
    html = found.get("html")
    if not html or "css" in found:
        return {}
    css = extract_style_tags(html)
    return {"css": css} if css else {}


FLAT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("fenced-tagged", _from_tagged_blocks),
    ("fenced-sniffed", _from_untagged_blocks),
    ("raw-document", _from_raw_document),
    ("style-tags", _from_style_tags),
)


def extract_style_tags(html: str) -> str:
    """Concatenate <style> contents in document order, blank-line separated."""
    soup = BeautifulSoup(html, "html.parser")
    styles = [
        "".join(str(child) for child in tag.contents).strip()
        for tag in soup.find_all("style")
    ]
    return "\n\n".join(s for s in styles if s)


def parse_flat(raw_text: str) -> ParsedArtifact:
    """Recover one HTML document and one stylesheet."""
    raw_text = raw_text or ""
    blocks = scan_fenced_blocks(raw_text)
    found: Dict[str, str] = {}
    used: List[str] = []

    for name, strategy in FLAT_STRATEGIES:
        if "html" in found and "css" in found:
            break
        for slot, value in strategy(raw_text, blocks, found).items():
            if value and slot not in found:
                found[slot] = value
                if name not in used:
                    used.append(name)

    artifact = ParsedArtifact(
        mode=OutputMode.FLAT,
        html=found.get("html", ""),
        css=found.get("css", ""),
        strategies=used,
    )
    logger.debug(
        f"Flat parse: {len(blocks)} block(s), html={len(artifact.html)} "
        f"css={len(artifact.css)} via {used or 'nothing'}"
    )
    return artifact


# ---------------------------------------------------------------------------
# MULTI-FILE
# ---------------------------------------------------------------------------


def infer_language(path: str) -> str:
    _, dot, extension = path.rpartition(".")
    if not dot:
        return "plaintext"
    return _EXTENSION_LANGUAGES.get(extension.lower(), "plaintext")


def _strip_enclosing_fence(body: str) -> str:
    """Unwrap a fenced section body; prose after the closing fence is dropped."""
    text = body.strip()
    if not text.startswith("```"):
        return text
    fenced = _FENCE_RE.match(text)
    if fenced:
        return fenced.group(3).strip()
    # Opening fence without a closing one
    first_newline = text.find("\n")
    if first_newline == -1:
        return ""
    return text[first_newline + 1:].strip()


def parse_multi_file(raw_text: str) -> ParsedArtifact:
    """
    Recover `---FILE: <path>---` sections in source order.

    A section ends at the next file marker, at `---END---` or at the end of
    the text. Empty sections are dropped; a repeated path replaces the
    earlier body but keeps its position.
    """
    raw_text = raw_text or ""
    markers = list(_FILE_MARKER_RE.finditer(raw_text))
    files: Dict[str, GeneratedFile] = {}

    for index, marker in enumerate(markers):
        path = marker.group(1).strip().strip("`'\"*")
        section_end = markers[index + 1].start() if index + 1 < len(markers) else len(raw_text)
        end_marker = _END_MARKER_RE.search(raw_text, marker.end(), section_end)
        if end_marker:
            section_end = end_marker.start()

        body = _strip_enclosing_fence(raw_text[marker.end():section_end])
        if not path or not body:
            continue
        files[path] = GeneratedFile(name=path, content=body, language=infer_language(path))

    artifact = ParsedArtifact(
        mode=OutputMode.MULTI_FILE,
        files=list(files.values()),
        strategies=["file-markers"] if files else [],
    )
    logger.debug(f"Multi-file parse: {len(markers)} marker(s), {len(artifact.files)} file(s)")
    return artifact


def build_fallback_files(html: str, css: str) -> List[GeneratedFile]:
    """
    Wrap a flat HTML/CSS pair into a minimal React app.

    The body markup becomes the fragment returned by App.tsx; the
    stylesheet becomes index.css.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for node in soup.find_all(string=lambda s: isinstance(s, (Comment, Doctype))):
        node.extract()
    if soup.head:
        soup.head.decompose()
    container = soup.body or soup.html or soup
    markup = container.decode_contents().strip()
    markup = re.sub(r"\bclass=", "className=", markup)
    indented = "\n".join("      " + line for line in markup.splitlines())

    app = (
        "import React from 'react';\n"
        "import './index.css';\n"
        "\n"
        "const App: React.FC = () => {\n"
        "  return (\n"
        "    <>\n"
        f"{indented}\n"
        "    </>\n"
        "  );\n"
        "};\n"
        "\n"
        "export default App;\n"
    )
    return [
        GeneratedFile(name="App.tsx", content=app, language="typescript"),
        GeneratedFile(name="index.css", content=css or "/* Add your styles here */", language="css"),
    ]


# ---------------------------------------------------------------------------
# ENTRY POINTS
# ---------------------------------------------------------------------------


def parse(raw_text: str, mode: OutputMode = OutputMode.FLAT) -> ParsedArtifact:
    if mode == OutputMode.MULTI_FILE:
        return parse_multi_file(raw_text)
    return parse_flat(raw_text)


def validate(artifact: ParsedArtifact) -> Optional[str]:
    """Return why the artifact is unusable, or None when it passes."""
    if artifact.mode == OutputMode.MULTI_FILE:
        return None if artifact.files else "No files found in model output"
    if len(artifact.html) < MIN_HTML_LENGTH:
        return f"HTML too short ({len(artifact.html)} chars, minimum {MIN_HTML_LENGTH})"
    if len(artifact.css) < MIN_CSS_LENGTH:
        return f"CSS too short ({len(artifact.css)} chars, minimum {MIN_CSS_LENGTH})"
    return None


def parse_code_modifications(reply: str) -> CodeModification:
    """
    Extract whole-file replacements from a code assistant reply.

    Prefers ```html:index.html / ```css:styles.css blocks; otherwise accepts
    a plain ```html block holding a full document, or a plain ```css block
    longer than 100 characters.
    """
    blocks = scan_fenced_blocks(reply or "")

    html = next(
        (b.body for b in blocks if b.language == "html" and b.filename == "index.html" and b.body),
        None,
    )
    if html is None:
        html = next(
            (b.body for b in blocks
             if b.language == "html" and not b.filename and "<!doctype" in b.body.lower()),
            None,
        )

    css = next(
        (b.body for b in blocks if b.language == "css" and b.filename == "styles.css" and b.body),
        None,
    )
    if css is None:
        css = next(
            (b.body for b in blocks if b.language == "css" and not b.filename and len(b.body) > 100),
            None,
        )

    return CodeModification(html=html, css=css)
