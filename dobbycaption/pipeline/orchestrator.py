"""
Purpose:
- Run encode -> describe -> caption for one image + tone, strictly in that order.
- Own the visible run state (idle / running / succeeded / failed) for one UI session.

Run tokens:
- Every started run gets the next integer token.
- Only the most recently started, non-cancelled run may commit its result;
  anything older finishes quietly and is dropped (no locking needed on one event loop).
- Cancel = "don't commit"; the HTTP call in flight is left to finish.
"""

from __future__ import annotations
import asyncio
import itertools
import logging
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, Optional, Set, Tuple
from ..vlm.captioner import CaptionClient
from ..vlm.describer import DescriptionClient
from ..vlm.encoder import encode
from .errors import CaptionPipelineError
from .models import DEFAULT_TONE, Caption, EncodedImage, ImageAsset, RunSnapshot, RunState, Tone

logger = logging.getLogger(__name__)

Encoder = Callable[[ImageAsset], Awaitable[EncodedImage]]
Observer = Callable[[RunSnapshot], None]

async def run_pipeline(
    asset: ImageAsset,
    tone: Tone,
    *,
    describer: DescriptionClient,
    captioner: CaptionClient,
    encoder: Encoder = encode,
) -> Caption:
    """
    One stateless run. Hard errors propagate; nothing intermediate is returned.
    """
    image = await encoder(asset)
    description = await describer.describe(image)
    return await captioner.caption(description, tone)

def error_text(exc: BaseException) -> str:
    return f"Error: {exc}"

@dataclass
class RunHandle:
    token: int
    task: "asyncio.Task[RunSnapshot]"
    pipeline: "CaptionPipeline" = field(repr=False)

    def cancel(self) -> None:
        self.pipeline.cancel(self.token)

class CaptionPipeline:
    def __init__(
        self,
        describer: DescriptionClient,
        captioner: CaptionClient,
        *,
        encoder: Encoder = encode,
        tone: Tone = DEFAULT_TONE,
        on_change: Optional[Observer] = None,
    ):
        self.describer = describer
        self.captioner = captioner
        self.encoder = encoder
        self.on_change = on_change
        self._asset: Optional[ImageAsset] = None
        self._tone = Tone(tone)
        self._tokens = itertools.count(1)
        self._latest = 0
        self._cancelled: Set[int] = set()
        self._snapshot = RunSnapshot(tone=self._tone)

    # --- selection -----------------------------------------------------------

    @property
    def asset(self) -> Optional[ImageAsset]:
        return self._asset

    @property
    def tone(self) -> Tone:
        return self._tone

    def select_image(self, asset: Optional[ImageAsset]) -> RunSnapshot:
        # a run still going for the previous image must not land on the new one
        if self._snapshot.loading:
            self._cancelled.add(self._latest)
        self._asset = asset
        return self._publish(RunSnapshot(tone=self._tone, has_image=asset is not None))

    def set_tone(self, tone: Tone) -> RunSnapshot:
        self._tone = Tone(tone)
        return self._publish(replace(self._snapshot, tone=self._tone))

    def snapshot(self) -> RunSnapshot:
        return self._snapshot

    # --- runs ----------------------------------------------------------------

    async def generate(self) -> RunSnapshot:
        """
        Run to completion and return this run's terminal snapshot.
        No image selected -> nothing happens, current snapshot returned.
        """
        started = self._begin()
        if started is None:
            return self._snapshot
        return await self._execute(*started)

    def start(self) -> Optional[RunHandle]:
        started = self._begin()
        if started is None:
            return None
        task = asyncio.create_task(self._execute(*started))
        return RunHandle(token=started[0], task=task, pipeline=self)

    def cancel(self, token: int) -> None:
        self._cancelled.add(token)
        if token == self._latest and self._snapshot.loading:
            logger.info("run %d cancelled", token)
            self._publish(RunSnapshot(tone=self._tone, has_image=self._asset is not None))

    def is_current(self, token: int) -> bool:
        return token == self._latest and token not in self._cancelled

    def _begin(self) -> Optional[Tuple[int, ImageAsset, Tone]]:
        if self._asset is None:
            logger.debug("generate ignored: no image selected")
            return None
        token = next(self._tokens)
        self._latest = token
        # every older token is stale now
        self._cancelled.clear()
        asset, tone = self._asset, self._tone
        self._publish(RunSnapshot(state=RunState.RUNNING, loading=True, run_id=token, tone=tone, has_image=True))
        logger.info("run %d started (tone=%s, image=%s)", token, tone.value, asset.filename or "unnamed")
        return token, asset, tone

    async def _execute(self, token: int, asset: ImageAsset, tone: Tone) -> RunSnapshot:
        try:
            caption = await run_pipeline(
                asset, tone, describer=self.describer, captioner=self.captioner, encoder=self.encoder
            )
            result = RunSnapshot(
                state=RunState.SUCCEEDED, output=caption, run_id=token, tone=tone, has_image=True
            )
        except asyncio.CancelledError:
            self.cancel(token)
            raise
        except CaptionPipelineError as e:
            logger.warning("run %d failed: %s", token, e)
            result = RunSnapshot(
                state=RunState.FAILED, output=error_text(e), run_id=token, tone=tone, has_image=True
            )
        except Exception as e:
            logger.exception("run %d crashed", token)
            result = RunSnapshot(
                state=RunState.FAILED, output=error_text(e), run_id=token, tone=tone, has_image=True
            )
        self._commit(token, result)
        return result

    def _commit(self, token: int, result: RunSnapshot) -> bool:
        if not self.is_current(token):
            logger.info("run %d finished after a newer run/selection; result dropped", token)
            return False
        self._publish(result)
        logger.info("run %d %s", token, result.state.value)
        return True

    def _publish(self, snap: RunSnapshot) -> RunSnapshot:
        self._snapshot = snap
        if self.on_change is not None:
            self.on_change(snap)
        return snap
