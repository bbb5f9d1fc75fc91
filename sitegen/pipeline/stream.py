"""
Progress event stream.
======================
Wraps one orchestrator run as an async iterator of wire events:
generation-id, progress*, then exactly one complete or error.
"""
import asyncio
import uuid
from typing import Any, AsyncIterator, Dict, Optional

from .. import __version__
from ..domain import DeploymentConfig
from ..generators import ConfigNormalizer, IntakeValidationError
from ..interfaces import IRepository
from .config import PHASES
from .logger import PipelineLogger
from .orchestrator import PipelineOrchestrator

ENGINES = (
    "config-normalizer",
    "archetype-classifier",
    "page-planner",
    "design-token-generator",
    "layout-selector",
    "content-synthesizer",
    "site-assembler",
    "quality-gate",
)

FEATURES = (
    "archetype-classification",
    "page-planning",
    "design-tokens",
    "responsive-layouts",
    "image-generation",
    "copy-generation",
    "seo-metadata",
    "navigation-integrity",
    "quality-iteration",
    "deployment",
)

_DONE = object()


def status_descriptor() -> Dict[str, Any]:
    return {
        "version": __version__,
        "engines": len(ENGINES),
        "phases": len(PHASES),
        "features": list(FEATURES),
    }


def error_event(message: str) -> Dict[str, Any]:
    return {"type": "error", "error": message}


class GenerationStream:
    """
    One generation exposed as an event stream.

    The orchestrator runs as its own task. Closing the iterator early (the
    caller disconnected) cancels the task. The last event of every
    generation is kept in the repository under ``generation:<id>``.
    """

    KEY_PREFIX = "generation:"

    def __init__(self, orchestrator: PipelineOrchestrator, repository: Optional[IRepository] = None,
                 logger: Optional[PipelineLogger] = None):
        self.orchestrator = orchestrator
        self.repository = repository
        self.logger = logger or PipelineLogger("pipeline.stream")
        self.normalizer = ConfigNormalizer()

    def last_event(self, generation_id: str) -> Optional[Dict[str, Any]]:
        if self.repository is None:
            return None
        return self.repository.get(self.KEY_PREFIX + generation_id)

    def _record(self, generation_id: str, event: Dict[str, Any]) -> Dict[str, Any]:
        if self.repository is not None:
            self.repository.put(self.KEY_PREFIX + generation_id, event)
        return event

    async def events(self, intake: Dict[str, Any], deployment: Optional[Dict[str, Any]] = None,
                     generation_id: Optional[str] = None) -> AsyncIterator[Dict[str, Any]]:
        generation_id = generation_id or uuid.uuid4().hex
        yield self._record(generation_id, {"type": "generation-id", "generationId": generation_id})

        try:
            project = self.normalizer.normalize(intake)
        except IntakeValidationError as e:
            self.logger.error(str(e))
            yield self._record(generation_id, error_event(str(e)))
            return
        deploy_config = DeploymentConfig.from_dict(deployment) if deployment else None

        queue: asyncio.Queue = asyncio.Queue()
        task = asyncio.create_task(self.orchestrator.run(
            project,
            on_progress=lambda progress: queue.put_nowait(progress.to_event()),
            deployment=deploy_config,
        ))
        task.add_done_callback(lambda _: queue.put_nowait(_DONE))

        try:
            while True:
                event = await queue.get()
                if event is _DONE:
                    break
                yield self._record(generation_id, event)

            try:
                result = task.result()
            except Exception as e:
                self.logger.error(f"Generation {generation_id} failed: {e}")
                yield self._record(generation_id, error_event(str(e) or type(e).__name__))
                return
            yield self._record(generation_id, result.to_event())
        finally:
            if not task.done():
                self.logger.warning(f"Generation {generation_id} cancelled")
                task.cancel()
