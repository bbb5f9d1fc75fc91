"""
Page planning.
==============
Deterministic page list, hierarchy, navigation and internal-link graph
for a project and its archetype.
"""
from typing import Dict, List

from ..domain import (
    ProjectConfig, ArchetypeProfile, PlannedPage, PlannedSection, PageSEO,
    InternalLink, NavigationItem, NavigationStructure, PageHierarchy, PagePlan,
)


# id -> (title, type, order)
PAGE_CATALOG = {
    "home": ("Home", "home", 1),
    "about": ("About Us", "about", 2),
    "services": ("Our Services", "services", 3),
    "contact": ("Contact", "contact", 4),
    "portfolio": ("Portfolio", "portfolio", 5),
    "blog": ("Blog", "blog", 6),
    "pricing": ("Pricing", "pricing", 7),
    "privacy": ("Privacy Policy", "legal", 8),
    "terms": ("Terms of Service", "legal", 9),
    "faq": ("FAQ", "faq", 10),
}

MAX_PAGES = 12

PORTFOLIO_ARCHETYPES = frozenset({"portfolio", "saas"})
BLOG_ARCHETYPES = frozenset({"blog", "saas"})
PRICING_ARCHETYPES = frozenset({"saas", "e-commerce"})

# page type -> ((section id, section type, required), ...)
DEFAULT_SECTIONS = {
    "home": (("hero", "hero", True), ("services", "services", False), ("features", "features", False)),
    "about": (("hero", "hero", True), ("about", "about", True), ("values", "features", False)),
    "services": (("hero", "hero", True), ("services", "services", True)),
    "contact": (("hero", "hero", True), ("contact", "contact", True)),
}
FALLBACK_SECTIONS = (("hero", "hero", True), ("content", "content", False))


def page_href(page: PlannedPage) -> str:
    return page.filename


class PagePlanner:
    """Produces an ordered, deduplicated page plan."""

    def plan(self, project: ProjectConfig, archetype: ArchetypeProfile) -> PagePlan:
        page_ids = self._select_pages(project, archetype.archetype)

        pages: List[PlannedPage] = []
        seen = set()
        for page_id in page_ids:
            if page_id in seen:
                continue
            seen.add(page_id)
            pages.append(self._create_page(page_id, project))
        pages = sorted(pages, key=lambda p: p.order)[:MAX_PAGES]

        links = self.internal_links(pages)
        pages = [self._with_links(page, links) for page in pages]

        return PagePlan(
            pages=pages,
            hierarchy=self.hierarchy(pages),
            internal_links=links,
            navigation=self.navigation(pages),
        )

    def _select_pages(self, project: ProjectConfig, archetype: str) -> List[str]:
        page_ids = ["home", "about"]
        if project.services:
            page_ids.append("services")
        page_ids.append("contact")

        if archetype in PORTFOLIO_ARCHETYPES:
            page_ids.append("portfolio")
        if archetype in BLOG_ARCHETYPES:
            page_ids.append("blog")
        if archetype in PRICING_ARCHETYPES:
            page_ids.append("pricing")

        page_ids.extend(["privacy", "terms", "faq"])
        return page_ids

    def _create_page(self, page_id: str, project: ProjectConfig) -> PlannedPage:
        title, page_type, order = PAGE_CATALOG[page_id]
        required = page_id in ("home", "about", "services", "contact")
        sections = [
            PlannedSection(id=sid, type=stype, order=index + 1, required=sreq)
            for index, (sid, stype, sreq) in enumerate(DEFAULT_SECTIONS.get(page_type, FALLBACK_SECTIONS))
        ]
        children = [] if page_id != "home" else [pid for pid in PAGE_CATALOG if pid != "home"]
        return PlannedPage(
            id=page_id,
            slug=page_id,
            title=title,
            type=page_type,
            order=order,
            required=required,
            sections=sections,
            seo=self.default_seo(page_id, title, project),
            parent=None if page_id == "home" else "home",
            children=children,
        )

    def _with_links(self, page: PlannedPage, links: List[InternalLink]) -> PlannedPage:
        own = [link for link in links if link.source == page.id]
        children = [c for c in page.children if any(link.target == c for link in links)] if page.is_root else []
        return PlannedPage(
            id=page.id, slug=page.slug, title=page.title, type=page.type, order=page.order,
            required=page.required, sections=page.sections, seo=page.seo,
            internal_links=own, parent=page.parent, children=children,
        )

    @staticmethod
    def default_seo(page_id: str, title: str, project: ProjectConfig) -> PageSEO:
        description = f"{title} - {project.project_name}"
        canonical = "/" if page_id == "home" else f"/{page_id}.html"
        return PageSEO(
            title=f"{title} | {project.project_name}",
            description=description,
            h1=title,
            canonical=canonical,
            keywords=[],
            og={"title": title, "description": description, "image": "", "type": "website"},
            twitter={"card": "summary", "title": title, "description": description, "image": ""},
            schema={"@context": "https://schema.org", "@type": "WebPage", "name": title},
        )

    @staticmethod
    def hierarchy(pages: List[PlannedPage]) -> PageHierarchy:
        root = next((p for p in pages if p.type == "home"), pages[0])
        return PageHierarchy(root=root, children=[p for p in pages if p.id != root.id], depth=1)

    @staticmethod
    def internal_links(pages: List[PlannedPage]) -> List[InternalLink]:
        """Home links to every other required page; services gets one CTA to contact."""
        links: List[InternalLink] = []
        by_type: Dict[str, PlannedPage] = {}
        for page in pages:
            by_type.setdefault(page.type, page)

        home = by_type.get("home")
        if home:
            for page in pages:
                if page.id != home.id and page.required:
                    links.append(InternalLink(source=home.id, target=page.id, text=page.title, type="navigation"))

        services, contact = by_type.get("services"), by_type.get("contact")
        if services and contact:
            links.append(InternalLink(source=services.id, target=contact.id, text="Get in Touch", type="cta"))
        return links

    @staticmethod
    def navigation(pages: List[PlannedPage]) -> NavigationStructure:
        ordered = sorted(pages, key=lambda p: p.order)
        primary = [
            NavigationItem(slug=p.slug, label=p.title, order=p.order, href=page_href(p))
            for p in ordered if p.required
        ]
        footer = [
            NavigationItem(slug=p.slug, label=p.title, order=p.order, href=page_href(p))
            for p in ordered if not p.required or p.type == "legal"
        ]
        return NavigationStructure(primary=primary, footer=footer)
