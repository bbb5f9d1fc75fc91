"""
Layout selection.
=================
Blueprint lookup by archetype, section-order variant selection and the
per-breakpoint projection of the blueprint's responsive rules.
"""
import logging
from typing import Dict, List

from ..domain import (
    ProjectConfig, ArchetypeProfile, PlannedPage, Blueprint, BlueprintSection,
    SectionVariant, BreakpointRule, BreakpointSpec, LayoutVariant, GeneratedSection,
    GeneratedLayout, LayoutBreakpoint, SectionBreakpoint, ARCHETYPES, BREAKPOINTS,
)
from ..interfaces import IContentGenerator
from ..prompts.library import PROMPT_LAYOUT_VARIANT

logger = logging.getLogger("generators.layout")

STYLES = ("modern", "classic", "minimal", "bold")
COMPLEXITIES = ("simple", "moderate", "rich")


def _rules(mobile: str, tablet: str, desktop: str, order: int, mobile_visible: bool = True) -> Dict[str, BreakpointRule]:
    return {
        "mobile": BreakpointRule(visible=mobile_visible, order=order, layout=mobile),
        "tablet": BreakpointRule(visible=True, order=order, layout=tablet),
        "desktop": BreakpointRule(visible=True, order=order, layout=desktop),
    }


GENERIC_BLUEPRINT = Blueprint(
    id="service-business",
    name="Service Business",
    description="Hero, services, about, features, contact",
    sections=[
        BlueprintSection(
            id="hero", type="hero", order=1, required=True,
            variants=[SectionVariant(id="hero-split", name="Split Hero", layout="split", alignment="left", columns=2,
                                     best_for=["services", "professional"])],
            responsive=_rules("stack", "split", "split", 1),
        ),
        BlueprintSection(
            id="services", type="services", order=2, required=True,
            variants=[SectionVariant(id="services-grid", name="Service Grid", layout="grid", columns=3)],
            responsive=_rules("stack", "grid-2", "grid-3", 2),
        ),
        BlueprintSection(
            id="about", type="about", order=3, required=False,
            variants=[SectionVariant(id="about-split", name="Story Split", layout="split", alignment="left", columns=2)],
            responsive=_rules("stack", "split", "split", 3),
        ),
        BlueprintSection(
            id="features", type="features", order=4, required=False,
            variants=[SectionVariant(id="features-grid", name="Feature Grid", layout="grid", columns=3)],
            responsive=_rules("stack", "grid-2", "grid-3", 4),
        ),
        BlueprintSection(
            id="content", type="content", order=5, required=False,
            variants=[SectionVariant(id="content-prose", name="Prose", layout="single", alignment="left")],
            responsive=_rules("single", "single", "single", 5),
        ),
        BlueprintSection(
            id="contact", type="contact", order=6, required=True,
            variants=[SectionVariant(id="contact-form", name="Contact Form", layout="split", columns=2)],
            responsive=_rules("stack", "split", "split", 6),
        ),
    ],
    breakpoints={
        "mobile": BreakpointSpec(breakpoint="mobile", layout="single-column", typography="compact", spacing="tight"),
        "tablet": BreakpointSpec(breakpoint="tablet", layout="two-column"),
        "desktop": BreakpointSpec(breakpoint="desktop", layout="multi-column", typography="large", spacing="relaxed"),
    },
)

# Every archetype shares the generic blueprint for now; per-archetype
# blueprints only need a new entry here.
ARCHETYPE_BLUEPRINTS: Dict[str, Blueprint] = {archetype: GENERIC_BLUEPRINT for archetype in ARCHETYPES}

DEFAULT_SECTION_VARIANT = SectionVariant(id="default", name="Default", layout="single", alignment="center")
DEFAULT_RESPONSIVE = _rules("stack", "single", "single", 99)


def blueprint_for(archetype: str) -> Blueprint:
    return ARCHETYPE_BLUEPRINTS.get(archetype, GENERIC_BLUEPRINT)


class LayoutSelector:
    """Picks a blueprint and section-order variant for each planned page."""

    def __init__(self, generator: IContentGenerator):
        self.generator = generator

    def select(self, page: PlannedPage, project: ProjectConfig, archetype: ArchetypeProfile) -> GeneratedLayout:
        blueprint = blueprint_for(archetype.archetype)
        natural = self.natural_order(page, blueprint)

        prompt = PROMPT_LAYOUT_VARIANT.format(
            page_title=page.title,
            page_type=page.type,
            archetype=archetype.archetype,
            project_name=project.project_name,
            section_ids=", ".join(natural),
        )
        context = {"project": project.fingerprint(), "page": page.id}
        raw = self.generator.produce(
            "layout-variant", prompt, context,
            lambda: self.fallback_variant(page, natural),
        )
        variant = self._sanitize(raw, page, natural)
        sections = self.generate_sections(page, blueprint, variant)
        return GeneratedLayout(
            page_id=page.id,
            blueprint=blueprint,
            selected_variant=variant,
            sections=sections,
            responsive=self.responsive(sections, blueprint),
        )

    @staticmethod
    def natural_order(page: PlannedPage, blueprint: Blueprint) -> List[str]:
        """Page section ids in blueprint order, then planned order for unknown types."""
        def rank(section):
            bp = blueprint.section_for(section.type)
            return (bp.order if bp else len(blueprint.sections) + 1, section.order)
        return [s.id for s in sorted(page.sections, key=rank)]

    @staticmethod
    def fallback_variant(page: PlannedPage, natural: List[str]) -> Dict:
        return {
            "name": "Default",
            "description": f"Blueprint order for {page.title}",
            "sectionOrder": list(natural),
            "style": "modern",
            "complexity": "moderate",
        }

    def _sanitize(self, raw: Dict, page: PlannedPage, natural: List[str]) -> LayoutVariant:
        """Keep only known section ids, each once, and append any the variant dropped."""
        requested = raw.get("sectionOrder") or []
        order: List[str] = []
        for section_id in requested:
            if section_id in natural and section_id not in order:
                order.append(section_id)
        order.extend(s for s in natural if s not in order)

        style = raw.get("style") if raw.get("style") in STYLES else "modern"
        complexity = raw.get("complexity") if raw.get("complexity") in COMPLEXITIES else "moderate"
        return LayoutVariant(
            id=f"{page.id}-variant",
            name=str(raw.get("name") or "Default"),
            description=str(raw.get("description") or ""),
            section_order=order,
            style=style,
            complexity=complexity,
        )

    @staticmethod
    def generate_sections(page: PlannedPage, blueprint: Blueprint, variant: LayoutVariant) -> List[GeneratedSection]:
        by_id = {s.id: s for s in page.sections}
        sections = []
        for index, section_id in enumerate(variant.section_order):
            planned = by_id[section_id]
            bp = blueprint.section_for(planned.type)
            sections.append(GeneratedSection(
                id=planned.id,
                type=planned.type,
                variant=bp.variants[0] if bp and bp.variants else DEFAULT_SECTION_VARIANT,
                order=index + 1,
                responsive=bp.responsive if bp else DEFAULT_RESPONSIVE,
            ))
        return sections

    @staticmethod
    def responsive(sections: List[GeneratedSection], blueprint: Blueprint) -> Dict[str, LayoutBreakpoint]:
        """Project each section's declared rules onto the three breakpoints."""
        result = {}
        for breakpoint in BREAKPOINTS:
            spec = blueprint.breakpoints.get(breakpoint)
            entries = []
            for section in sections:
                rule = section.responsive.get(breakpoint) or DEFAULT_RESPONSIVE[breakpoint]
                entries.append(SectionBreakpoint(
                    section_id=section.id,
                    visible=rule.visible,
                    order=section.order,
                    layout=rule.layout,
                ))
            result[breakpoint] = LayoutBreakpoint(
                breakpoint=breakpoint,
                layout=spec.layout if spec else "single-column",
                sections=entries,
            )
        return result
