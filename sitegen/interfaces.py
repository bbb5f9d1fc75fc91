from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .domain import DeploymentConfig, DeploymentResult


class CollaboratorError(RuntimeError):
    """Raised by collaborator adapters when an external call fails or returns unusable data."""


# =============================================================================
# Generation collaborators
# =============================================================================

class ITextGenerationCollaborator(ABC):
    """Produces structured JSON from a prompt."""

    @abstractmethod
    def generate(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Generate a structured response.

        Args:
            prompt: Fully rendered prompt text
            context: Extra structured context passed alongside the prompt

        Returns:
            Parsed JSON object

        Raises:
            CollaboratorError: when the call fails or the response is not JSON
        """
        pass


class IImageGenerationCollaborator(ABC):
    """Produces an image for a prompt."""

    @abstractmethod
    def generate(self, prompt: str, size: str, quality: str) -> Dict[str, Any]:
        """
        Returns:
            Dict with at least a "url" key

        Raises:
            CollaboratorError
        """
        pass


class IContentGenerator(ABC):
    """
    Content generation capability used by every generation stage.

    One variant is selected at construction time; call sites never check
    for credentials themselves.
    """

    @abstractmethod
    def produce(self, stage: str, prompt: str, context: Dict[str, Any],
                fallback: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        """Return structured output for a stage, or the fallback's output."""
        pass

    @abstractmethod
    def produce_image(self, prompt: str, size: str, quality: str) -> Optional[Dict[str, Any]]:
        """Return {"url": ...} or None when no image can be produced."""
        pass

    @property
    @abstractmethod
    def collaborator_backed(self) -> bool:
        pass


# =============================================================================
# Quality gate collaborators
# =============================================================================

class IPageHandle(ABC):
    """A single open browsing context."""

    @abstractmethod
    async def evaluate(self, script: str) -> Any:
        pass

    @abstractmethod
    async def content(self) -> str:
        """Rendered HTML of the page."""
        pass

    @abstractmethod
    async def close(self):
        pass


class IBrowserAutomation(ABC):
    """Browser automation used by the quality gate."""

    @abstractmethod
    async def open(self, url: str, timeout_ms: int) -> IPageHandle:
        pass

    @abstractmethod
    async def close(self):
        """Release the browser and every context it owns."""
        pass


class IMetricsProvider(ABC):
    """Source of runtime performance metrics (lcp/fid/cls in ms or unitless)."""

    @abstractmethod
    async def collect(self, page: IPageHandle) -> Dict[str, float]:
        pass


# =============================================================================
# Storage and publishing
# =============================================================================

class IRepository(ABC):
    """Process-scoped key/value store with an explicit reset."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def put(self, key: str, value: Any):
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        pass

    @abstractmethod
    def clear(self):
        pass


class IDeploymentAdapter(ABC):
    """Publishes an assembled output directory."""

    @abstractmethod
    async def deploy(self, output_dir: str, config: "DeploymentConfig") -> "DeploymentResult":
        pass
