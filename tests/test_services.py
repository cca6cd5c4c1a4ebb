"""
Tests for the supporting services: titles, live preview and the project store.
"""

import random
import re

import pytest

from dsy_core.services.preview import compile_live_preview
from dsy_core.services.project_store import (
    InMemoryProjectStore,
    ProjectStore,
    generate_session_id,
)
from dsy_core.services.titles import (
    DEFAULT_TITLE,
    PROJECT_SUFFIXES,
    extract_keywords,
    generate_project_title,
    sanitize_filename,
)


class TestTitles:
    """Tests for keyword titles."""

    def test_type_keywords_lead(self):
        assert extract_keywords("Create a dark portfolio website with a hero") == ["Hero", "Portfolio", "Dark"]

    def test_title_from_prompt(self):
        assert generate_project_title("Create a dark portfolio website with a hero") == "Hero_Portfolio_Dark"

    def test_title_capped_at_four_words(self):
        title = generate_project_title("bakery sourdough croissants baguettes pastries muffins")

        assert title == "Bakery_Sourdough_Croissants_Baguettes"

    def test_single_keyword_gets_suffix(self):
        title = generate_project_title("make me a blog", rng=random.Random(0))

        first, suffix = title.split("_")
        assert first == "Blog"
        assert suffix in PROJECT_SUFFIXES

    @pytest.mark.parametrize("prompt", [None, "", "make a nice simple page", "a b c"])
    def test_default_title(self, prompt):
        assert generate_project_title(prompt) == DEFAULT_TITLE

    def test_sanitize_filename(self):
        assert sanitize_filename("My Café / Landing!!") == "My_Caf_Landing"
        assert len(sanitize_filename("x" * 80)) == 50
        assert sanitize_filename("") == ""


class TestLivePreview:
    """Tests for compile_live_preview."""

    def test_style_inlined_before_head_close(self):
        html = (
            "<!DOCTYPE html><html><head><title>T</title>"
            '<link rel="stylesheet" href="styles.css"></head><body><p>Hi</p></body></html>'
        )

        document = compile_live_preview(html, "p { color: red; }")

        assert "styles.css" not in document
        assert document.index("<style>") < document.index("</head>")
        assert "p { color: red; }" in document
        assert "<p>Hi</p>" in document

    def test_document_without_head(self):
        document = compile_live_preview("<html><body><p>Hi</p></body></html>", "p { margin: 0; }")

        assert "<head><style>" in document
        assert document.index("</head>") < document.index("<body")

    def test_fragment_is_wrapped(self):
        document = compile_live_preview("<p>Hi</p>", "p { margin: 0; }")

        assert document.startswith("<!DOCTYPE html>")
        assert "<title>DSY Core Preview</title>" in document
        assert 'href="https://fonts.googleapis.com/css2?family=Inter' in document
        assert "<body>\n  <p>Hi</p>\n</body>" in document
        # reset first, so the user stylesheet overrides it
        reset = document.index("* { margin: 0; padding: 0; box-sizing: border-box; }")
        assert reset < document.index("p { margin: 0; }") < document.index("</style>")

    def test_no_css_leaves_document_alone(self):
        html = "<!DOCTYPE html><html><head></head><body></body></html>"

        assert compile_live_preview(html, "") == html


class TestProjectStore:
    """Tests for InMemoryProjectStore."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryProjectStore(), ProjectStore)

    @pytest.mark.asyncio
    async def test_put_get_stamps_updated_at(self):
        store = InMemoryProjectStore()

        await store.put("history:1", {"title": "Bakery"})
        record = await store.get("history:1")

        assert record["title"] == "Bakery"
        assert "updatedAt" in record
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_values_are_copied(self):
        store = InMemoryProjectStore()
        value = {"files": ["a"]}

        await store.put("k", value)
        value["files"].append("b")
        fetched = await store.get("k")
        fetched["files"].append("c")

        assert (await store.get("k"))["files"] == ["a"]

    @pytest.mark.asyncio
    async def test_list_and_delete(self):
        store = InMemoryProjectStore()
        for key in ("history:b", "history:a", "session:x"):
            await store.put(key, {})

        assert await store.list("history:") == ["history:a", "history:b"]
        assert await store.delete("history:a") is True
        assert await store.delete("history:a") is False
        assert len(store) == 2


class TestSessionId:
    def test_format(self):
        for _ in range(20):
            assert re.fullmatch(r"DSY-[A-Z0-9]{6}", generate_session_id())
