"""
Purpose:
- Stage 1: ask the vision model (Qwen2.5-VL) what is in the picture.
- Output is a short scene description that only the caption stage ever sees.

Notes:
- Credential is read at call time; missing -> ConfigurationError, no request made.
- Missing/empty content on a 2xx -> generic description (pipeline keeps going)
  unless strict mode is on.
"""

from __future__ import annotations
import logging
from typing import Callable, List, Optional
from ..core.settings import Credentials, read_credentials, settings
from ..pipeline.errors import ConfigurationError, MalformedResponse, RemoteServiceError
from ..pipeline.models import EncodedImage, SceneDescription
from .fireworks import ChatCompletionsClient, Message, first_message_content
from .params import SamplingParams, description_params

logger = logging.getLogger(__name__)

SERVICE = "Qwen"

SYSTEM_PROMPT = (
    "You are a visual captioning assistant. For the given image, summarize only the key "
    "subjects and salient objects or actions that define the main event or scene. Ignore "
    "minor background details. Keep description clear, concise, and focused on what stands out most."
)

IMAGE_MARKER = "<image>"

FALLBACK_DESCRIPTION = "A visually interesting image"

def build_messages(image: EncodedImage) -> List[Message]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"{IMAGE_MARKER}{image.data_url}"},
    ]

class DescriptionClient:
    def __init__(
        self,
        chat: Optional[ChatCompletionsClient] = None,
        *,
        params: Optional[SamplingParams] = None,
        credentials: Callable[[], Credentials] = read_credentials,
        strict: Optional[bool] = None,
    ):
        self.chat = chat or ChatCompletionsClient()
        self.params = params or description_params()
        self._credentials = credentials
        self.strict = settings.strict_responses if strict is None else strict

    async def describe(self, image: EncodedImage) -> SceneDescription:
        api_key = self._credentials().qwen_api_key
        if not api_key:
            raise ConfigurationError("Qwen API key is missing")

        resp = await self.chat.post(
            service=SERVICE, api_key=api_key, params=self.params, messages=build_messages(image)
        )
        if not resp.is_success:
            body = resp.text
            raise RemoteServiceError(
                f"Qwen API error: {body}", service=SERVICE, status_code=resp.status_code, body=body
            )

        data = self.chat.json_body(resp, service=SERVICE)
        content = first_message_content(data)
        if not content:
            if self.strict:
                raise MalformedResponse("Qwen API returned no description", service=SERVICE, payload=data)
            logger.warning("description missing from Qwen response; using fallback")
            return FALLBACK_DESCRIPTION
        return content
