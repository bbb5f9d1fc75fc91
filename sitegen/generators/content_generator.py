"""
Content generation strategy.
============================
Chooses between collaborator-backed and deterministic generation once,
at construction time.
"""
import logging
from typing import Any, Callable, Dict, Optional

from ..interfaces import (
    IContentGenerator, ITextGenerationCollaborator, IImageGenerationCollaborator,
    IRepository, CollaboratorError,
)
from ..utils import fingerprint

logger = logging.getLogger("generators.content")


class DeterministicGenerator(IContentGenerator):
    """Always returns the caller's fallback output."""

    @property
    def collaborator_backed(self) -> bool:
        return False

    def produce(self, stage: str, prompt: str, context: Dict[str, Any],
                fallback: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        return fallback()

    def produce_image(self, prompt: str, size: str, quality: str) -> Optional[Dict[str, Any]]:
        return None


class CollaboratorBackedGenerator(IContentGenerator):
    """
    Calls the external collaborators.

    Text results are memoized in the repository under a fingerprint of
    (project, stage, prompt) so concurrent runs for different projects never
    share entries. A CollaboratorError degrades to the deterministic fallback;
    any other exception propagates.
    """

    CACHE_PREFIX = "content:"

    def __init__(self, text: ITextGenerationCollaborator,
                 image: Optional[IImageGenerationCollaborator] = None,
                 repository: Optional[IRepository] = None):
        self.text = text
        self.image = image
        self.repository = repository

    @property
    def collaborator_backed(self) -> bool:
        return True

    def produce(self, stage: str, prompt: str, context: Dict[str, Any],
                fallback: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        key = self.CACHE_PREFIX + fingerprint(context.get("project"), stage, prompt)
        if self.repository is not None:
            cached = self.repository.get(key)
            if cached is not None:
                return cached

        try:
            result = self.text.generate(prompt, context)
        except CollaboratorError as e:
            logger.warning("⚠️ %s: collaborator failed (%s), using deterministic output", stage, e)
            return fallback()

        if self.repository is not None:
            self.repository.put(key, result)
        return result

    def produce_image(self, prompt: str, size: str, quality: str) -> Optional[Dict[str, Any]]:
        if self.image is None:
            return None
        try:
            return self.image.generate(prompt, size, quality)
        except CollaboratorError as e:
            logger.warning("⚠️ image generation failed (%s), keeping placeholder", e)
            return None


def build_content_generator(text: Optional[ITextGenerationCollaborator] = None,
                            image: Optional[IImageGenerationCollaborator] = None,
                            repository: Optional[IRepository] = None) -> IContentGenerator:
    """Select the generator variant for the available collaborators."""
    if text is None:
        return DeterministicGenerator()
    return CollaboratorBackedGenerator(text, image=image, repository=repository)
