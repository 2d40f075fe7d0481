"""
Purpose:
- The single-page form: file picker, tone select, generate button, caption output.
- Backed by one shared CaptionPipeline (app.state.ui_pipeline), like a single browser tab.

Notes:
- Submitting without a new file reuses the last selected image.
- Button is disabled client-side until a file is chosen and while a request is in flight.
"""

from __future__ import annotations
import html
from string import Template
from typing import Optional
from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from ..pipeline.models import DEFAULT_TONE, ImageAsset, RunSnapshot, Tone

router = APIRouter(tags=["ui"])

PAGE = Template("""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>DobbyCaption!</title>
</head>
<body>
<header><h1>DobbyCaption!</h1></header>
<main>
  <p>Drop an image, get a caption matching your tone, powered by Qwen + Dobby.</p>
  <form id="caption-form" method="post" action="/" enctype="multipart/form-data">
    <p>$selected</p>
    <input type="file" id="img-upload" name="image" accept="image/*">
    <label for="tone-select">Choose Tone:</label>
    <select id="tone-select" name="tone">
$options
    </select>
    <button type="submit" id="generate-btn" class="generate-btn" $disabled>Generate Caption</button>
  </form>
  $output
</main>
<script>
  const form = document.getElementById("caption-form");
  const file = document.getElementById("img-upload");
  const btn = document.getElementById("generate-btn");
  const hasImage = $has_image;
  file.addEventListener("change", () => { btn.disabled = !(hasImage || file.files.length); });
  form.addEventListener("submit", () => { btn.disabled = true; btn.textContent = "Generating..."; });
</script>
</body>
</html>
""")

def render_page(snap: RunSnapshot, filename: Optional[str] = None) -> str:
    options = "\n".join(
        f'      <option value="{t.value}"{" selected" if t is snap.tone else ""}>{t.label}</option>'
        for t in Tone
    )
    if snap.has_image:
        selected = f"Selected: {html.escape(filename or 'image')}"
    else:
        selected = "No image selected"
    output = f'<div class="caption-output">{html.escape(snap.output)}</div>' if snap.output else ""
    return PAGE.substitute(
        selected=selected,
        options=options,
        disabled="" if snap.has_image and not snap.loading else "disabled",
        output=output,
        has_image="true" if snap.has_image else "false",
    )

@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    pipeline = request.app.state.ui_pipeline
    asset = pipeline.asset
    return render_page(pipeline.snapshot(), filename=asset.filename if asset else None)

@router.post("/", response_class=HTMLResponse)
async def submit(
    request: Request,
    image: Optional[UploadFile] = File(default=None),
    tone: Tone = Form(default=DEFAULT_TONE),
):
    pipeline = request.app.state.ui_pipeline
    if image is not None and image.filename:
        raw = await image.read()
        pipeline.select_image(ImageAsset.from_bytes(raw, media_type=image.content_type, filename=image.filename))
    pipeline.set_tone(tone)
    await pipeline.generate()
    asset = pipeline.asset
    return render_page(pipeline.snapshot(), filename=asset.filename if asset else None)
