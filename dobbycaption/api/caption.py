"""
Purpose:
- JSON surface for the caption pipeline.
- POST /api/v1/caption runs its own pipeline per request (independent callers never
  overwrite each other); /state exposes the shared form session.
"""

from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, File, Form, Request, UploadFile
from pydantic import BaseModel, Field
from ..pipeline.models import DEFAULT_TONE, ImageAsset, RunSnapshot, RunState, Tone
from ..pipeline.orchestrator import CaptionPipeline

router = APIRouter(prefix="/api/v1/caption", tags=["caption"])

class ToneOut(BaseModel):
    value: str
    label: str

class CaptionOut(BaseModel):
    ok: bool
    state: RunState
    caption: Optional[str] = None
    error: Optional[str] = None
    tone: Tone = DEFAULT_TONE
    filename: Optional[str] = None
    run_id: Optional[int] = None

class StateOut(BaseModel):
    state: RunState
    loading: bool
    output: str = ""
    tone: Tone
    has_image: bool
    run_id: Optional[int] = None

def to_caption_out(snap: RunSnapshot, filename: Optional[str] = None) -> CaptionOut:
    return CaptionOut(
        ok=snap.succeeded,
        state=snap.state,
        caption=snap.output if snap.succeeded else None,
        error=snap.output if snap.failed else None,
        tone=snap.tone,
        filename=filename,
        run_id=snap.run_id,
    )

@router.get("/tones", response_model=List[ToneOut])
def tones():
    return [ToneOut(value=t.value, label=t.label) for t in Tone]

@router.post("", response_model=CaptionOut)
async def caption(
    request: Request,
    image: UploadFile = File(...),
    tone: Tone = Form(default=DEFAULT_TONE, description="Caption style"),
):
    """
    Upload an image, get a caption. Pipeline failures come back as ok=false + error.
    """
    raw = await image.read()
    asset = ImageAsset.from_bytes(raw, media_type=image.content_type, filename=image.filename)

    state = request.app.state
    pipeline = CaptionPipeline(state.describer, state.captioner, tone=tone)
    pipeline.select_image(asset)
    snap = await pipeline.generate()
    return to_caption_out(snap, filename=image.filename)

@router.get("/state", response_model=StateOut)
def session_state(request: Request):
    """
    Snapshot of the shared form session (what the page at / is showing).
    """
    snap: RunSnapshot = request.app.state.ui_pipeline.snapshot()
    return StateOut(
        state=snap.state,
        loading=snap.loading,
        output=snap.output,
        tone=snap.tone,
        has_image=snap.has_image,
        run_id=snap.run_id,
    )
