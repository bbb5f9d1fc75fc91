import logging
from typing import Any, Dict

from ..domain import (
    ProjectConfig, ArchetypeProfile, LayoutPattern, ContentStrategy, SEOStrategy,
    ImageStrategy, ARCHETYPES, DEFAULT_ARCHETYPE,
)
from ..interfaces import IContentGenerator
from ..prompts.library import PROMPT_INDUSTRY_CLASSIFICATION

logger = logging.getLogger("generators.archetype")

FALLBACK_CONFIDENCE = 0.7

# Substring rules on the lower-cased industry, first match wins.
ARCHETYPE_RULES = (
    (("shop", "store", "ecommerce"), "e-commerce"),
    (("portfolio", "creative"), "portfolio"),
    (("saas", "software"), "saas"),
    (("restaurant", "food"), "restaurant"),
    (("legal", "law"), "legal"),
    (("health", "medical"), "healthcare"),
)

# archetype -> (pattern name, sections, best for)
DEFAULT_LAYOUT_PATTERNS = {
    "service-business": ("Service-First", ["hero", "services", "about", "testimonials", "contact"], ["Professional services", "Consulting"]),
    "e-commerce": ("Product-Focused", ["hero", "products", "categories", "testimonials", "contact"], ["Online stores", "Retail"]),
    "portfolio": ("Visual-Portfolio", ["hero", "portfolio", "about", "contact"], ["Designers", "Photographers"]),
    "saas": ("SaaS-Landing", ["hero", "features", "benefits", "pricing", "testimonials", "cta"], ["Software products"]),
    "blog": ("Content-First", ["hero", "posts", "categories", "about", "contact"], ["Blogs", "Content creators"]),
    "restaurant": ("Restaurant-Showcase", ["hero", "menu", "about", "gallery", "reservations"], ["Restaurants", "Cafes"]),
    "healthcare": ("Healthcare-Trust", ["hero", "services", "about", "testimonials", "contact"], ["Medical practices", "Clinics"]),
    "legal": ("Legal-Professional", ["hero", "services", "about", "testimonials", "contact"], ["Law firms", "Legal services"]),
    "real-estate": ("Real-Estate-Listings", ["hero", "properties", "about", "contact"], ["Real estate"]),
    "education": ("Education-Informative", ["hero", "programs", "about", "testimonials", "contact"], ["Schools", "Training"]),
    "nonprofit": ("Nonprofit-Mission", ["hero", "mission", "programs", "donate", "contact"], ["Nonprofits", "Charities"]),
    "corporate": ("Corporate-Professional", ["hero", "services", "about", "careers", "contact"], ["Corporations"]),
}


def archetype_for_industry(industry: str) -> str:
    """Deterministic archetype for an industry label."""
    lowered = (industry or "").lower()
    for needles, archetype in ARCHETYPE_RULES:
        if any(needle in lowered for needle in needles):
            return archetype
    return DEFAULT_ARCHETYPE


def default_layout_patterns(archetype: str):
    name, sections, best_for = DEFAULT_LAYOUT_PATTERNS.get(archetype, DEFAULT_LAYOUT_PATTERNS[DEFAULT_ARCHETYPE])
    description = " → ".join(s.title() for s in sections)
    return [LayoutPattern(name=name, description=description, sections=list(sections), best_for=list(best_for))]


class ArchetypeClassifier:
    """Maps a project to a website archetype and content/SEO/image strategy."""

    def __init__(self, generator: IContentGenerator):
        self.generator = generator

    def classify(self, project: ProjectConfig) -> ArchetypeProfile:
        prompt = PROMPT_INDUSTRY_CLASSIFICATION.format(
            project_name=project.project_name,
            industry=project.industry,
            services=", ".join(s.name for s in project.services) or "none listed",
            audiences=", ".join(project.target_audiences),
            archetypes=", ".join(ARCHETYPES),
        )
        context = {"project": project.fingerprint()}
        raw = self.generator.produce("classification", prompt, context, lambda: self._fallback(project))
        return self._to_profile(project, raw)

    def _fallback(self, project: ProjectConfig) -> Dict[str, Any]:
        return {
            "detectedIndustry": project.industry,
            "archetype": archetype_for_industry(project.industry),
            "confidence": FALLBACK_CONFIDENCE,
        }

    def _to_profile(self, project: ProjectConfig, raw: Dict[str, Any]) -> ArchetypeProfile:
        archetype = raw.get("archetype")
        if archetype not in ARCHETYPES:
            logger.warning("⚠️ Unknown archetype %r, using %s", archetype, DEFAULT_ARCHETYPE)
            archetype = DEFAULT_ARCHETYPE

        try:
            confidence = float(raw.get("confidence", FALLBACK_CONFIDENCE))
        except (TypeError, ValueError):
            confidence = FALLBACK_CONFIDENCE
        confidence = min(1.0, max(0.0, confidence))

        keywords = [str(k) for k in raw.get("primaryKeywords") or []]
        if not keywords:
            keywords = [project.industry.lower()] + [s.name.lower() for s in project.services[:4]]
            if project.location.city:
                keywords.append(f"{project.industry.lower()} {project.location.city.lower()}")

        colors = [c for c in (project.brand.primary_color, project.brand.accent_color) if c]

        return ArchetypeProfile(
            industry=project.industry,
            detected_industry=str(raw.get("detectedIndustry") or project.industry),
            confidence=confidence,
            archetype=archetype,
            layout_patterns=default_layout_patterns(archetype),
            content_strategy=ContentStrategy(tone=str(raw.get("tone") or project.tone_of_voice)),
            seo_strategy=SEOStrategy(
                primary_keywords=keywords,
                local_seo=bool(project.location.city),
            ),
            image_strategy=ImageStrategy(
                hero_style=str(raw.get("heroStyle") or "professional"),
                color_scheme=colors,
                mood=str(raw.get("mood") or "professional"),
            ),
        )
