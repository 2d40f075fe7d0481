"""
Unit tests for the caption (text) client.

Tests cover:
- tone-specific system prompt, description passed through as the user message
- separate credential from the description stage
- RemoteServiceError wording on non-2xx
- fallback only when content is structurally absent
"""

import pytest

from dobbycaption.pipeline.errors import (
    ConfigurationError,
    MalformedResponse,
    RemoteServiceError,
)
from dobbycaption.pipeline.models import Tone
from dobbycaption.vlm.captioner import FALLBACK_CAPTION, CaptionClient, system_prompt
from dobbycaption.vlm.params import SamplingParams

from conftest import CAPTION_MODEL, chat_body


class TestSystemPrompt:

    @pytest.mark.unit
    @pytest.mark.parametrize("tone", list(Tone))
    def test_mentions_tone(self, tone):
        prompt = system_prompt(tone)
        assert f"create a {tone.value}, meme-worthy caption in 25 words or less." in prompt
        assert "CaptionDobby" in prompt

    @pytest.mark.unit
    def test_accepts_plain_string(self):
        assert system_prompt("brutal") == system_prompt(Tone.BRUTAL)


class TestCaptionRequest:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_returns_caption(self, captioner):
        assert await captioner.caption("A dog on a skateboard", Tone.WITTY) == "Sk8er dog"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_payload_shape(self, captioner, fireworks):
        await captioner.caption("A dog on a skateboard", Tone.BRUTAL)

        request = fireworks.requests[0]
        assert request.headers["Authorization"] == "Bearer test-dobby-key"
        body = fireworks.caption_calls()[0]
        assert body["model"] == CAPTION_MODEL
        assert body["temperature"] == 0.6
        assert body["top_k"] == 40
        system, user = body["messages"]
        assert system["role"] == "system" and "brutal" in system["content"]
        assert user == {"role": "user", "content": "A dog on a skateboard"}


class TestCaptionErrors:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_key(self, captioner, fireworks, creds):
        creds.dobby_api_key = None

        with pytest.raises(ConfigurationError, match="^Dobby API key is missing$"):
            await captioner.caption("desc", Tone.WITTY)
        assert fireworks.requests == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_keys_are_independent(self, captioner, fireworks, creds):
        creds.qwen_api_key = None

        assert await captioner.caption("desc", Tone.WITTY) == "Sk8er dog"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_2xx_uses_reason_phrase(self, captioner, fireworks):
        fireworks.reply(CAPTION_MODEL, status=503, text="overloaded")

        with pytest.raises(RemoteServiceError) as exc_info:
            await captioner.caption("desc", Tone.WITTY)

        assert str(exc_info.value) == "Dobby API error: Service Unavailable"
        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "overloaded"


class TestCaptionFallback:

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"choices": []}, chat_body(None)])
    async def test_absent_content_falls_back(self, captioner, fireworks, body):
        fireworks.reply(CAPTION_MODEL, json_body=body)

        assert await captioner.caption("desc", Tone.WITTY) == FALLBACK_CAPTION

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_caption_is_kept(self, captioner, fireworks):
        fireworks.reply(CAPTION_MODEL, json_body=chat_body(""))

        assert await captioner.caption("desc", Tone.WITTY) == ""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_strict_mode_raises(self, chat, creds, fireworks):
        fireworks.reply(CAPTION_MODEL, json_body={})
        strict = CaptionClient(chat, params=SamplingParams(model=CAPTION_MODEL), credentials=creds, strict=True)

        with pytest.raises(MalformedResponse):
            await strict.caption("desc", Tone.WITTY)
