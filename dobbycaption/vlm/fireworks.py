"""
Purpose:
- Thin async wrapper around an OpenAI-compatible /chat/completions endpoint (Fireworks).
- Shared by the description (vision) and caption (text) stages.

Notes:
- Exactly one POST per call; no retries.
- Callers own status handling (each stage words its error differently).
- Pass a shared httpx.AsyncClient to reuse connections; otherwise one is opened per call.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
import httpx
from ..core.settings import settings
from ..pipeline.errors import RemoteServiceError
from .params import SamplingParams

logger = logging.getLogger(__name__)

Message = Dict[str, Any]

def build_payload(params: SamplingParams, messages: List[Message]) -> Dict[str, Any]:
    return {**params.as_payload(), "messages": messages}

def first_message_content(data: Any) -> Optional[str]:
    """
    choices[0].message.content, or None when any level is missing / the wrong shape.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None

class ChatCompletionsClient:
    def __init__(
        self,
        http: Optional[httpx.AsyncClient] = None,
        *,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._http = http
        self.url = url or settings.chat_completions_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_s

    async def post(self, *, service: str, api_key: str, params: SamplingParams, messages: List[Message]) -> httpx.Response:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        payload = build_payload(params, messages)
        logger.info("%s request -> %s (model=%s)", service, self.url, params.model)
        try:
            if self._http is not None:
                resp = await self._http.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s request failed: %r", service, e)
            raise RemoteServiceError(f"{service} API error: {e}", service=service) from e
        logger.info("%s response <- %s", service, resp.status_code)
        return resp

    @staticmethod
    def json_body(resp: httpx.Response, *, service: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteServiceError(
                f"{service} API error: response was not JSON",
                service=service,
                status_code=resp.status_code,
                body=resp.text,
            ) from e
