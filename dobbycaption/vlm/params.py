"""
Purpose:
- Model id + sampling knobs for each stage as data, not literals in request code.
- Defaults come from settings; tests can build their own tables.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict
from ..core.settings import Settings, settings as default_settings

@dataclass(frozen=True)
class SamplingParams:
    model: str
    max_tokens: int = 4096
    top_p: float = 1.0
    top_k: int = 40
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    temperature: float = 0.6

    def as_payload(self) -> Dict[str, Any]:
        return asdict(self)

    def with_model(self, model: str) -> "SamplingParams":
        return replace(self, model=model)

def _shared(cfg: Settings, model: str) -> SamplingParams:
    return SamplingParams(
        model=model,
        max_tokens=cfg.max_tokens,
        top_p=cfg.top_p,
        top_k=cfg.top_k,
        presence_penalty=cfg.presence_penalty,
        frequency_penalty=cfg.frequency_penalty,
        temperature=cfg.temperature,
    )

def description_params(cfg: Settings = default_settings) -> SamplingParams:
    return _shared(cfg, cfg.description_model)

def caption_params(cfg: Settings = default_settings) -> SamplingParams:
    return _shared(cfg, cfg.caption_model)
