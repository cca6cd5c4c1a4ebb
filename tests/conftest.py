"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Assets (image data URI, link)
- Design-feature pre-processors backed by httpx.MockTransport

Test doubles and canned model output live in support.py. No test touches
the network or needs API keys.
"""

import json

import httpx
import pytest

from dsy_core.ai.preprocess.design_features import DesignFeatureExtractor
from dsy_core.ai.schemas.assets import Asset, AssetKind

from support import IMAGE_DATA_URI, PREPROCESSOR_FEATURES, make_extractor


# ---------------------------------------------------------------------------
# ASSET FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def image_asset() -> Asset:
    return Asset(kind=AssetKind.IMAGE, payload=IMAGE_DATA_URI, name="mockup.png")


@pytest.fixture
def link_asset() -> Asset:
    return Asset(kind=AssetKind.LINK, payload="https://example.com/inspiration", name="inspiration")


# ---------------------------------------------------------------------------
# PRE-PROCESSOR FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def failing_preprocessor() -> DesignFeatureExtractor:
    """Pre-processor whose Space is down."""
    return make_extractor(lambda request: httpx.Response(503, json={"error": "Space is sleeping"}))


@pytest.fixture
def working_preprocessor() -> DesignFeatureExtractor:
    return make_extractor(
        lambda request: httpx.Response(200, json={"data": [json.dumps(PREPROCESSOR_FEATURES)]})
    )
