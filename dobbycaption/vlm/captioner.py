"""
Purpose:
- Stage 2: turn the scene description into a short caption in the chosen tone (Dobby).
- Tone only changes the system prompt; the user message is the description as-is.
"""

from __future__ import annotations
import logging
from typing import Callable, List, Optional
from ..core.settings import Credentials, read_credentials, settings
from ..pipeline.errors import ConfigurationError, MalformedResponse, RemoteServiceError
from ..pipeline.models import Caption, SceneDescription, Tone
from .fireworks import ChatCompletionsClient, Message, first_message_content
from .params import SamplingParams, caption_params

logger = logging.getLogger(__name__)

SERVICE = "Dobby"

FALLBACK_CAPTION = "No caption generated."

def system_prompt(tone: Tone) -> str:
    return (
        "\nYou are CaptionDobby. Given a visual scene description, "
        f"create a {Tone(tone).value}, meme-worthy caption in 25 words or less.\n"
        "Make it clever and instantly shareable.\n"
    )

def build_messages(description: SceneDescription, tone: Tone) -> List[Message]:
    return [
        {"role": "system", "content": system_prompt(tone)},
        {"role": "user", "content": description},
    ]

class CaptionClient:
    def __init__(
        self,
        chat: Optional[ChatCompletionsClient] = None,
        *,
        params: Optional[SamplingParams] = None,
        credentials: Callable[[], Credentials] = read_credentials,
        strict: Optional[bool] = None,
    ):
        self.chat = chat or ChatCompletionsClient()
        self.params = params or caption_params()
        self._credentials = credentials
        self.strict = settings.strict_responses if strict is None else strict

    async def caption(self, description: SceneDescription, tone: Tone) -> Caption:
        api_key = self._credentials().dobby_api_key
        if not api_key:
            raise ConfigurationError("Dobby API key is missing")

        resp = await self.chat.post(
            service=SERVICE, api_key=api_key, params=self.params, messages=build_messages(description, tone)
        )
        if not resp.is_success:
            raise RemoteServiceError(
                f"Dobby API error: {resp.reason_phrase}",
                service=SERVICE,
                status_code=resp.status_code,
                body=resp.text,
            )

        data = self.chat.json_body(resp, service=SERVICE)
        content = first_message_content(data)
        # only a missing field falls back; an empty caption is passed through
        if content is None:
            if self.strict:
                raise MalformedResponse("Dobby API returned no caption", service=SERVICE, payload=data)
            logger.warning("caption missing from Dobby response; using fallback")
            return FALLBACK_CAPTION
        return content
