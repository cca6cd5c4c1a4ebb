"""
Shared test doubles and canned model output.

- StubProvider: a scripted AIProvider that records every remote call
- Canned model outputs (flat page, multi-file page, optimizer reply)
- make_extractor: design-feature pre-processor backed by httpx.MockTransport
"""

import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

import httpx

from dsy_core.ai.credentials import CredentialPool
from dsy_core.ai.preprocess.design_features import DesignFeatureExtractor
from dsy_core.ai.providers.base import (
    AIProvider,
    History,
    InlineImage,
    ProviderType,
    TokenUsage,
)


# ---------------------------------------------------------------------------
# STUB PROVIDER
# ---------------------------------------------------------------------------

# A script item is either the text to return, an exception instance to raise,
# or a factory receiving the selected credential and returning the exception.
ScriptItem = Union[str, BaseException, Callable[[str], BaseException]]

DEFAULT_KEYS = ("stub-key-alpha-0001", "stub-key-bravo-0002", "stub-key-charlie-0003")


class StubProvider(AIProvider):
    """
    Scripted provider.

    Goes through the real AIProvider.generate path (credential selection,
    rate-limit bookkeeping, image decoding); only `_send` is replaced.
    """

    def __init__(
        self,
        script: Iterable[ScriptItem] = (),
        keys: Iterable[str] = DEFAULT_KEYS,
        provider_type: ProviderType = ProviderType.GEMINI,
        supports_images: bool = True,
        pool_name: str = "stub",
    ):
        super().__init__(pool=CredentialPool(keys, name=pool_name), model="stub-model")
        self.provider_type = provider_type
        self.supports_images = supports_images
        self.script: List[ScriptItem] = list(script)
        self.calls: List[Dict[str, Any]] = []

    async def _send(
        self,
        credential: str,
        model: str,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        images: List[InlineImage],
        history: History,
    ) -> Tuple[str, TokenUsage]:
        self.calls.append(
            {
                "credential": credential,
                "model": model,
                "prompt": prompt,
                "system_prompt": system_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "images": list(images),
                "history": list(history),
            }
        )
        if not self.script:
            raise AssertionError("StubProvider script exhausted")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            raise item(credential)
        return item, TokenUsage(prompt_tokens=10, completion_tokens=20)

    @property
    def credentials_used(self) -> List[str]:
        return [call["credential"] for call in self.calls]


def text_stub(script: Iterable[ScriptItem] = (), **kwargs) -> StubProvider:
    """Stub standing in for the fast text (SambaNova) provider."""
    kwargs.setdefault("pool_name", "stub-text")
    return StubProvider(script, provider_type=ProviderType.SAMBANOVA, supports_images=False, **kwargs)


# ---------------------------------------------------------------------------
# CANNED MODEL OUTPUT
# ---------------------------------------------------------------------------

VALID_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Bakery</title>
  <link rel="stylesheet" href="styles.css">
</head>
<body>
  <header class="hero"><h1>Fresh bread every morning</h1></header>
  <main><section class="features"><p>Sourdough, rye and croissants.</p></section></main>
</body>
</html>"""

VALID_CSS = """body {
  margin: 0;
  font-family: 'Inter', sans-serif;
  background: #1e1e2e;
}

.hero {
  padding: 4rem 2rem;
  color: #ffffff;
}"""

FLAT_OUTPUT = f"Here is your page.\n\n```html\n{VALID_HTML}\n```\n\n```css\n{VALID_CSS}\n```\n"

# Parses, but the HTML is under the 100 character threshold
SHORT_OUTPUT = "```html\n<html><body>hi</body></html>\n```\n```css\nbody { margin: 0; }\n```"

MULTI_FILE_OUTPUT = """---FILE: App.tsx---
import React from 'react';
import Header from './components/Header';

export default function App() {
  return <Header />;
}
---FILE: components/Header.tsx---
export default function Header() {
  return <header className="hero">Fresh bread</header>;
}
---FILE: index.css---
.hero { padding: 4rem; }
---END---
"""

DESIGN_SPEC_JSON: Dict[str, Any] = {
    "layout": {"type": "landing", "sections": ["hero", "menu", "footer"], "columns": 2},
    "colors": {
        "background": "#fffaf0",
        "primary": "#8b4513",
        "secondary": "#d2691e",
        "accent": "#ffd700",
        "text": "#2b2b2b",
    },
    "typography": {"headingFont": "Playfair Display", "bodyFont": "Inter"},
    "effects": ["shadows"],
    "isDarkTheme": False,
}

OPTIMIZED_TEXT = "A warm landing page for an artisan bakery with a hero, a menu grid and a footer."

OPTIMIZER_OUTPUT = (
    f"---TEXT---\n{OPTIMIZED_TEXT}\n---JSON---\n```json\n{json.dumps(DESIGN_SPEC_JSON)}\n```"
)

# Tiny PNG header is enough: the bytes are never decoded as an image
IMAGE_DATA_URI = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAAB"


# ---------------------------------------------------------------------------
# PRE-PROCESSOR
# ---------------------------------------------------------------------------

PREPROCESSOR_FEATURES: Dict[str, Any] = {
    "colors": {
        "primary": "#ff6600",
        "secondary": "#333333",
        "accent": "#ffcc00",
        "background": "#101010",
        "text": "#fafafa",
        "is_dark_theme": True,
    },
    "layout": {"type": "portfolio", "sections": ["navbar", "gallery", "contact"], "estimated_columns": 4},
}


def make_extractor(handler: Callable[[httpx.Request], httpx.Response]) -> DesignFeatureExtractor:
    return DesignFeatureExtractor(
        base_url="http://preprocessor.test",
        timeout=5,
        enabled=True,
        transport=httpx.MockTransport(handler),
    )
