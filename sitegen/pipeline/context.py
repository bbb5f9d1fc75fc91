"""
Pipeline context management.
============================
Holds run state and file I/O for one generation.
"""
import asyncio
import os
import json
import time
from dataclasses import dataclass, field, asdict, is_dataclass
from typing import Any, Callable, Dict, List, Optional

from ..domain import (
    ProjectConfig, ArchetypeProfile, PagePlan, DesignTokens,
    GeneratedLayout, SynthesizedContent, DeploymentResult,
)


def _to_jsonable(obj):
    if is_dataclass(obj):
        return asdict(obj)
    return obj.__dict__


@dataclass
class PipelineContext:
    """Holds all state during pipeline execution."""

    project: ProjectConfig
    output_dir: str

    archetype: Optional[ArchetypeProfile] = None
    plan: Optional[PagePlan] = None
    tokens: Optional[DesignTokens] = None
    layouts: Dict[str, GeneratedLayout] = field(default_factory=dict)
    content: SynthesizedContent = field(default_factory=SynthesizedContent)
    qa_report: Optional[Any] = None
    deployment: Optional[DeploymentResult] = None
    errors: List[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.monotonic)

    # Per-run; never shared between concurrent runs of one orchestrator
    on_progress: Optional[Callable[[Any], None]] = field(default=None, repr=False)
    semaphore: Optional[asyncio.Semaphore] = field(default=None, repr=False)

    intermediates_dir: str = ""

    def __post_init__(self):
        # Absolute path so the HTTP server and file URIs agree
        self.output_dir = os.path.abspath(self.output_dir)
        os.makedirs(self.output_dir, exist_ok=True)
        self.intermediates_dir = os.path.join(os.path.dirname(self.output_dir), "intermediates")

    @property
    def project_dir(self) -> str:
        return os.path.dirname(self.output_dir)

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)

    def save_file(self, filename: str, content: str) -> str:
        """Saves content to a file in output_dir."""
        path = os.path.join(self.output_dir, filename)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def save_intermediate(self, filename: str, data: Any):
        """Saves intermediate data for debugging."""
        os.makedirs(self.intermediates_dir, exist_ok=True)
        path = os.path.join(self.intermediates_dir, filename)
        with open(path, "w", encoding="utf-8") as f:
            if isinstance(data, (dict, list)):
                json.dump(data, f, indent=2, default=_to_jsonable)
            elif is_dataclass(data):
                json.dump(asdict(data), f, indent=2, default=_to_jsonable)
            else:
                f.write(str(data))
