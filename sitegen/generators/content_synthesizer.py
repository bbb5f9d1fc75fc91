"""
Content synthesis.
==================
Three independently invokable sub-generators run per page/section:
imagery, copy and SEO metadata.
"""
import logging
from typing import Dict, List

from ..domain import (
    ProjectConfig, ArchetypeProfile, DesignTokens, PlannedPage, GeneratedLayout,
    GeneratedSection, ImagePlan, GeneratedImage, SectionCopy, PageSEOData,
)
from ..interfaces import IContentGenerator
from ..prompts.library import PROMPT_SECTION_COPY, PROMPT_PAGE_SEO, PROMPT_IMAGE
from ..utils import truncate

logger = logging.getLogger("generators.content_synthesizer")

IMAGE_SECTION_TYPES = ("hero", "about", "services")
TITLE_LENGTH = 60
META_DESCRIPTION_LENGTH = 160

CTA_DEFAULTS = {
    "hero": ("Get Started", "contact.html"),
    "services": ("Request a Consultation", "contact.html"),
    "about": ("Meet the Team", "about.html"),
    "contact": ("Send Message", ""),
}


class ContentSynthesizer:
    """Image plans, section copy and page SEO for a project."""

    def __init__(self, generator: IContentGenerator, base_url: str = "https://example.com"):
        self.generator = generator
        self.base_url = base_url.rstrip("/")

    # -------------------------------------------------------------------------
    # Imagery
    # -------------------------------------------------------------------------

    def plan_images(self, layouts: Dict[str, GeneratedLayout], project: ProjectConfig,
                    archetype: ArchetypeProfile, tokens: DesignTokens) -> List[ImagePlan]:
        plans = []
        primary = tokens.colors.primary["500"]
        accent = tokens.colors.accent["500"]
        for page_id, layout in layouts.items():
            for section in layout.sections:
                if section.type not in IMAGE_SECTION_TYPES:
                    continue
                hero = section.type == "hero"
                plans.append(ImagePlan(
                    id=f"{page_id}-{section.id}",
                    page_id=page_id,
                    section_id=section.id,
                    type="hero" if hero else "service",
                    purpose="attention" if hero else "explanation",
                    prompt=PROMPT_IMAGE.format(
                        industry=project.industry,
                        section_type=section.type,
                        project_name=project.project_name,
                        mood=archetype.image_strategy.mood,
                        primary=primary,
                        accent=accent,
                    ),
                    width=1792 if hero else 1024,
                    height=1024,
                    aspect_ratio="16:9" if hero else "1:1",
                    alt=f"{section.type.title()} image for {project.project_name}",
                    priority="high" if hero else "medium",
                ))
        return plans

    def generate_image(self, plan: ImagePlan) -> GeneratedImage:
        """One image per plan entry; no URL when the generator produces nothing."""
        result = self.generator.produce_image(plan.prompt, plan.size, plan.quality)
        metadata = {
            "width": plan.width,
            "height": plan.height,
            "aspectRatio": plan.aspect_ratio,
            "priority": plan.priority,
            "placeholder": not result,
        }
        if result and result.get("revised_prompt"):
            metadata["revisedPrompt"] = result["revised_prompt"]
        return GeneratedImage(
            plan_id=plan.id,
            page_id=plan.page_id,
            section_id=plan.section_id,
            alt=plan.alt,
            url=(result or {}).get("url"),
            metadata=metadata,
        )

    # -------------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------------

    def write_copy(self, page: PlannedPage, section: GeneratedSection, project: ProjectConfig,
                   archetype: ArchetypeProfile) -> SectionCopy:
        prompt = PROMPT_SECTION_COPY.format(
            section_type=section.type,
            page_title=page.title,
            project_name=project.project_name,
            industry=project.industry,
            location=project.location.label() or "not specified",
            services=", ".join(s.name for s in project.services) or "not specified",
            tone=archetype.content_strategy.tone,
        )
        context = {"project": project.fingerprint(), "page": page.id, "section": section.id}
        raw = self.generator.produce("copy", prompt, context,
                                     lambda: self.default_copy(page, section, project))
        default_cta = CTA_DEFAULTS.get(section.type, ("Contact Us", "contact.html"))
        return SectionCopy(
            headline=str(raw.get("headline") or page.title),
            subheadline=str(raw.get("subheadline") or ""),
            description=str(raw.get("description") or ""),
            bullets=[str(b) for b in raw.get("bullets") or []],
            cta_text=str(raw.get("ctaText") or default_cta[0]),
            cta_link=str(raw.get("ctaLink") or default_cta[1]),
        )

    @staticmethod
    def default_copy(page: PlannedPage, section: GeneratedSection, project: ProjectConfig) -> Dict:
        name = project.project_name
        where = f" in {project.location.label()}" if project.location.label() else ""
        services = [s.name for s in project.services]

        if section.type == "hero":
            headline = name if page.is_root else page.title
            return {
                "headline": headline,
                "subheadline": f"Trusted {project.industry.lower()}{where}",
                "description": f"{name} delivers {project.industry.lower()} with a {project.tone_of_voice} approach.",
                "ctaText": "Get Started",
            }
        if section.type == "services":
            return {
                "headline": "Our Services",
                "subheadline": f"How {name} can help",
                "description": f"We offer {', '.join(services)}." if services else "Tailored solutions for every client.",
                "bullets": [s.description or s.name for s in project.services],
                "ctaText": "Request a Consultation",
            }
        if section.type == "about":
            return {
                "headline": f"About {name}",
                "description": f"{name} serves {', '.join(project.target_audiences)}{where}.",
            }
        if section.type == "features":
            return {
                "headline": f"Why Choose {name}",
                "bullets": ["Experienced team", "Clear communication", "Proven results"],
            }
        if section.type == "contact":
            return {
                "headline": "Get in Touch",
                "description": f"Contact {name} today.",
                "ctaText": "Send Message",
            }
        return {
            "headline": page.title,
            "description": f"{page.title} for {name}.",
        }

    # -------------------------------------------------------------------------
    # SEO
    # -------------------------------------------------------------------------

    def page_seo(self, page: PlannedPage, project: ProjectConfig, archetype: ArchetypeProfile) -> PageSEOData:
        keywords = list(archetype.seo_strategy.primary_keywords)
        prompt = PROMPT_PAGE_SEO.format(
            page_title=page.title,
            project_name=project.project_name,
            industry=project.industry,
            location=project.location.label() or "online",
            keywords=", ".join(keywords),
        )
        context = {"project": project.fingerprint(), "page": page.id}
        raw = self.generator.produce("seo", prompt, context, lambda: self.default_seo(page, project, keywords))

        title = truncate(str(raw.get("title") or f"{page.title} | {project.project_name}"), TITLE_LENGTH)
        description = truncate(str(raw.get("metaDescription") or (page.seo.description if page.seo else page.title)),
                               META_DESCRIPTION_LENGTH)
        url = self.page_url(page)

        return PageSEOData(
            title=title,
            meta_description=description,
            h1=str(raw.get("h1") or page.title),
            canonical=url,
            keywords=[str(k) for k in raw.get("keywords") or keywords],
            og={"title": title, "description": description, "url": url, "type": "website", "image": ""},
            twitter={"card": "summary_large_image", "title": title, "description": description},
            schema=self.schema(page, project, archetype, url),
        )

    def default_seo(self, page: PlannedPage, project: ProjectConfig, keywords: List[str]) -> Dict:
        where = f" in {project.location.label()}" if project.location.label() else ""
        return {
            "title": f"{page.title} | {project.project_name}",
            "metaDescription": f"{page.title} - {project.project_name}, {project.industry.lower()}{where}.",
            "h1": project.project_name if page.is_root else page.title,
            "keywords": keywords,
        }

    def page_url(self, page: PlannedPage) -> str:
        return f"{self.base_url}/" if page.is_root else f"{self.base_url}/{page.filename}"

    @staticmethod
    def schema(page: PlannedPage, project: ProjectConfig, archetype: ArchetypeProfile, url: str) -> Dict:
        schema_types = archetype.seo_strategy.schema_types
        schema_type = schema_types[0] if schema_types else "LocalBusiness"
        data = {
            "@context": "https://schema.org",
            "@type": schema_type,
            "name": project.project_name,
            "url": url,
        }
        location = project.location
        if schema_type == "LocalBusiness" and (location.city or location.region or location.country):
            data["address"] = {
                "@type": "PostalAddress",
                "addressLocality": location.city,
                "addressRegion": location.region,
                "addressCountry": location.country,
            }
        if page.is_root and project.services:
            data["description"] = ", ".join(s.name for s in project.services)
        return data
