# Common language: Environment/ops probe that surfaces version pins, configured models
# and which API keys are present (never their values).

from fastapi import APIRouter
from ..core.settings import read_credentials, settings
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
        return getattr(m, "__version__", "unknown")
    except Exception:
        return "not-installed"

@router.get("/healthz")
def healthz():
    creds = read_credentials()
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "pydantic": _ver("pydantic"),
            "pydantic_settings": _ver("pydantic_settings"),
            "httpx": _ver("httpx"),
            "PIL": _ver("PIL"),
        },
        "config": {
            "chat_completions_url": settings.chat_completions_url,
            "description_model": settings.description_model,
            "caption_model": settings.caption_model,
            "strict_responses": settings.strict_responses,
        },
        "env_keys_present": {
            "QWEN_API_KEY": bool(creds.qwen_api_key),
            "DOBBY_API_KEY": bool(creds.dobby_api_key),
        },
    }
