"""Pipeline module for SiteGen generation."""
from .config import PipelineConfig, FileNames, IntermediateFiles, Limits, PHASES
from .logger import PipelineLogger
from .context import PipelineContext

__all__ = [
    'PipelineConfig',
    'FileNames',
    'IntermediateFiles',
    'Limits',
    'PHASES',
    'PipelineLogger',
    'PipelineContext',
]
