"""
Purpose:
- FastAPI application factory and router mounts.
- Adds CORS for local dev frontends.
- One shared httpx.AsyncClient for both inference stages, closed on shutdown.
- Uvicorn will serve this on 0.0.0.0:8000 by default.
"""

from contextlib import asynccontextmanager
import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .core.settings import settings
from .core.logging_middleware import TimeLoggingMiddleware, configure_logging
from .pipeline.orchestrator import CaptionPipeline
from .vlm.captioner import CaptionClient
from .vlm.describer import DescriptionClient
from .vlm.fireworks import ChatCompletionsClient
from .api.health import router as health_router
from .api.caption import router as caption_router
from .api.ui import router as ui_router

@asynccontextmanager
async def lifespan(app: FastAPI):
    async with httpx.AsyncClient(timeout=settings.http_timeout_s) as http:
        chat = ChatCompletionsClient(http)
        app.state.describer = DescriptionClient(chat)
        app.state.captioner = CaptionClient(chat)
        app.state.ui_pipeline = CaptionPipeline(app.state.describer, app.state.captioner)
        yield

def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="DobbyCaption API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(TimeLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(health_router)
    app.include_router(caption_router)
    app.include_router(ui_router)
    return app

app = create_app()

def run() -> None:
    uvicorn.run("dobbycaption.main:app", host=settings.host, port=settings.port)

if __name__ == "__main__":
    run()
