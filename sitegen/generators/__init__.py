from .content_generator import (
    CollaboratorBackedGenerator, DeterministicGenerator, build_content_generator,
)
from .config_normalizer import ConfigNormalizer, IntakeValidationError
from .archetype_classifier import ArchetypeClassifier
from .page_planner import PagePlanner
from .design_tokens import DesignTokenGenerator
from .layout_selector import LayoutSelector
from .content_synthesizer import ContentSynthesizer
from .site_assembler import SiteAssembler

__all__ = [
    'CollaboratorBackedGenerator',
    'DeterministicGenerator',
    'build_content_generator',
    'ConfigNormalizer',
    'IntakeValidationError',
    'ArchetypeClassifier',
    'PagePlanner',
    'DesignTokenGenerator',
    'LayoutSelector',
    'ContentSynthesizer',
    'SiteAssembler',
]
