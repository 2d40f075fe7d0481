"""
Shared pytest fixtures for the DobbyCaption tests.

This module provides:
- Sample image bytes / ImageAsset
- A fake Fireworks chat-completions endpoint (httpx.MockTransport) that records requests
- Description / Caption clients and a CaptionPipeline wired to the fake endpoint
- Switchable credentials (no env or .env involved)
"""

import io
import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from PIL import Image

# Keep a developer's real keys out of the test run
os.environ.setdefault("QWEN_API_KEY", "test-qwen-key")
os.environ.setdefault("DOBBY_API_KEY", "test-dobby-key")

from dobbycaption.core.settings import Credentials
from dobbycaption.pipeline.models import ImageAsset
from dobbycaption.pipeline.orchestrator import CaptionPipeline
from dobbycaption.vlm.captioner import CaptionClient
from dobbycaption.vlm.describer import DescriptionClient
from dobbycaption.vlm.fireworks import ChatCompletionsClient
from dobbycaption.vlm.params import SamplingParams

FAKE_URL = "https://fireworks.test/inference/v1/chat/completions"
DESCRIPTION_MODEL = "test/qwen-vl"
CAPTION_MODEL = "test/dobby"


def chat_body(content: Any) -> Dict[str, Any]:
    """OpenAI-style chat completion body with one choice."""
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


# =============================================================================
# Sample Image Fixtures
# =============================================================================

def make_png(color=(200, 30, 30), size=(8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def sample_png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def image_asset(sample_png_bytes) -> ImageAsset:
    return ImageAsset.from_bytes(sample_png_bytes, media_type="image/png", filename="x.png")


# =============================================================================
# Fake Fireworks endpoint
# =============================================================================

Reply = Callable[[httpx.Request], httpx.Response]


class FakeFireworks:
    """
    Routes by the `model` field of the request body.
    Default replies: description "A dog on a skateboard", caption "Sk8er dog".
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.replies: Dict[str, Reply] = {
            DESCRIPTION_MODEL: lambda r: httpx.Response(200, json=chat_body("A dog on a skateboard")),
            CAPTION_MODEL: lambda r: httpx.Response(200, json=chat_body("Sk8er dog")),
        }

    def reply(self, model: str, status: int = 200, json_body: Any = None, text: Optional[str] = None) -> None:
        if text is not None:
            self.replies[model] = lambda r: httpx.Response(status, text=text)
        else:
            self.replies[model] = lambda r: httpx.Response(status, json=json_body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)
        return self.replies[body["model"]](request)

    def bodies(self, model: Optional[str] = None) -> List[Dict[str, Any]]:
        out = [json.loads(r.content) for r in self.requests]
        return [b for b in out if model is None or b["model"] == model]

    def description_calls(self) -> List[Dict[str, Any]]:
        return self.bodies(DESCRIPTION_MODEL)

    def caption_calls(self) -> List[Dict[str, Any]]:
        return self.bodies(CAPTION_MODEL)


@pytest.fixture
def fireworks() -> FakeFireworks:
    return FakeFireworks()


@pytest.fixture
def chat(fireworks) -> ChatCompletionsClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fireworks.handler))
    return ChatCompletionsClient(http, url=FAKE_URL, timeout=5.0)


# =============================================================================
# Credentials / clients / pipeline
# =============================================================================

@dataclass
class CredentialBox:
    qwen_api_key: Optional[str] = "test-qwen-key"
    dobby_api_key: Optional[str] = "test-dobby-key"

    def __call__(self) -> Credentials:
        return Credentials(qwen_api_key=self.qwen_api_key, dobby_api_key=self.dobby_api_key)


@pytest.fixture
def creds() -> CredentialBox:
    return CredentialBox()


@pytest.fixture
def describer(chat, creds) -> DescriptionClient:
    return DescriptionClient(
        chat, params=SamplingParams(model=DESCRIPTION_MODEL), credentials=creds, strict=False
    )


@pytest.fixture
def captioner(chat, creds) -> CaptionClient:
    return CaptionClient(
        chat, params=SamplingParams(model=CAPTION_MODEL), credentials=creds, strict=False
    )


@pytest.fixture
def pipeline(describer, captioner) -> CaptionPipeline:
    return CaptionPipeline(describer, captioner)
