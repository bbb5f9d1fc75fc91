from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field, asdict
import hashlib
import json

ARCHETYPES = (
    "service-business",
    "e-commerce",
    "portfolio",
    "saas",
    "blog",
    "restaurant",
    "healthcare",
    "legal",
    "real-estate",
    "education",
    "nonprofit",
    "corporate",
)

DEFAULT_ARCHETYPE = "service-business"

BREAKPOINTS = ("mobile", "tablet", "desktop")


# =============================================================================
# Project configuration
# =============================================================================

@dataclass(frozen=True)
class Service:
    name: str
    description: str = ""


@dataclass(frozen=True)
class Location:
    city: str = ""
    region: str = ""
    country: str = ""

    def label(self) -> str:
        return ", ".join(part for part in (self.city, self.region) if part)


@dataclass(frozen=True)
class BrandPreferences:
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None
    heading_font: Optional[str] = None
    body_font: Optional[str] = None


@dataclass(frozen=True)
class ProjectConfig:
    """Canonical project configuration. Read-only for the whole run."""
    project_name: str
    project_slug: str
    industry: str
    services: List[Service] = field(default_factory=list)
    location: Location = field(default_factory=Location)
    tone_of_voice: str = "professional"
    brand: BrandPreferences = field(default_factory=BrandPreferences)
    target_audiences: List[str] = field(default_factory=list)
    competitor_url: Optional[str] = None
    contact_email: str = ""
    contact_phone: str = ""

    def to_dict(self) -> Dict:
        return asdict(self)

    def fingerprint(self) -> str:
        """Stable hash of the configuration, used to key shared caches."""
        payload = json.dumps(self.to_dict(), sort_keys=True, default=str)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


# =============================================================================
# Archetype
# =============================================================================

@dataclass
class LayoutPattern:
    name: str
    description: str
    sections: List[str] = field(default_factory=list)
    best_for: List[str] = field(default_factory=list)


@dataclass
class ContentStrategy:
    tone: str = "professional"
    structure: str = "clear hierarchy"
    cta_style: str = "prominent buttons"
    trust_elements: List[str] = field(default_factory=lambda: ["testimonials", "credentials", "case studies"])
    conversion_flow: List[str] = field(default_factory=lambda: ["awareness", "interest", "decision", "action"])


@dataclass
class SEOStrategy:
    primary_keywords: List[str] = field(default_factory=list)
    content_types: List[str] = field(default_factory=lambda: ["service pages", "about page"])
    local_seo: bool = True
    schema_types: List[str] = field(default_factory=lambda: ["LocalBusiness", "Organization"])


@dataclass
class ImageStrategy:
    hero_style: str = "professional"
    image_types: List[str] = field(default_factory=lambda: ["hero", "service"])
    color_scheme: List[str] = field(default_factory=list)
    mood: str = "professional"


@dataclass
class ArchetypeProfile:
    industry: str
    detected_industry: str
    confidence: float
    archetype: str
    layout_patterns: List[LayoutPattern] = field(default_factory=list)
    content_strategy: ContentStrategy = field(default_factory=ContentStrategy)
    seo_strategy: SEOStrategy = field(default_factory=SEOStrategy)
    image_strategy: ImageStrategy = field(default_factory=ImageStrategy)

    def to_dict(self) -> Dict:
        return asdict(self)


# =============================================================================
# Page plan
# =============================================================================

@dataclass(frozen=True)
class PlannedSection:
    id: str
    type: str
    order: int
    required: bool = False


@dataclass(frozen=True)
class PageSEO:
    title: str
    description: str
    h1: str
    canonical: str
    keywords: List[str] = field(default_factory=list)
    og: Dict[str, str] = field(default_factory=dict)
    twitter: Dict[str, str] = field(default_factory=dict)
    schema: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InternalLink:
    source: str
    target: str
    text: str
    type: str = "navigation"


@dataclass(frozen=True)
class PlannedPage:
    """A single planned page. Created once by the planner, read-only afterwards."""
    id: str
    slug: str
    title: str
    type: str
    order: int
    required: bool
    sections: List[PlannedSection] = field(default_factory=list)
    seo: Optional[PageSEO] = None
    internal_links: List[InternalLink] = field(default_factory=list)
    parent: Optional[str] = None
    children: List[str] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.type == "home" or self.slug == "home"

    @property
    def filename(self) -> str:
        """Output file for this page; the root page maps to index.html."""
        return "index.html" if self.is_root else f"{self.slug}.html"

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["filename"] = self.filename
        return data


@dataclass(frozen=True)
class NavigationItem:
    slug: str
    label: str
    order: int
    href: str


@dataclass
class NavigationStructure:
    primary: List[NavigationItem] = field(default_factory=list)
    footer: List[NavigationItem] = field(default_factory=list)


@dataclass
class PageHierarchy:
    root: PlannedPage
    children: List[PlannedPage] = field(default_factory=list)
    depth: int = 1


@dataclass
class PagePlan:
    pages: List[PlannedPage]
    hierarchy: PageHierarchy
    internal_links: List[InternalLink]
    navigation: NavigationStructure

    def get(self, page_id: str) -> Optional[PlannedPage]:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None


# =============================================================================
# Design tokens
# =============================================================================

@dataclass(frozen=True)
class ColorPalette:
    primary: Dict[str, str]
    secondary: Dict[str, str]
    accent: Dict[str, str]
    neutral: Dict[str, str]
    semantic: Dict[str, str] = field(default_factory=dict)
    contrast: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DesignTokens:
    typography: Dict[str, Any]
    colors: ColorPalette
    shadows: Dict[str, str]
    spacing: Dict[str, str]
    components: Dict[str, Any]
    theme: Dict[str, Any]

    def to_dict(self) -> Dict:
        return asdict(self)


# =============================================================================
# Layout
# =============================================================================

@dataclass(frozen=True)
class BreakpointRule:
    visible: bool
    order: int
    layout: str


@dataclass(frozen=True)
class BreakpointSpec:
    breakpoint: str
    layout: str
    typography: str = "normal"
    spacing: str = "normal"


@dataclass(frozen=True)
class SectionVariant:
    id: str
    name: str
    layout: str
    alignment: str = "center"
    columns: int = 1
    description: str = ""
    best_for: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BlueprintSection:
    id: str
    type: str
    order: int
    required: bool
    variants: List[SectionVariant]
    responsive: Dict[str, BreakpointRule]


@dataclass(frozen=True)
class Blueprint:
    id: str
    name: str
    description: str
    sections: List[BlueprintSection]
    breakpoints: Dict[str, BreakpointSpec]

    def section_for(self, section_type: str) -> Optional[BlueprintSection]:
        for section in self.sections:
            if section.type == section_type or section.id == section_type:
                return section
        return None


@dataclass(frozen=True)
class LayoutVariant:
    id: str
    name: str
    description: str
    section_order: List[str]
    style: str = "modern"
    complexity: str = "moderate"


@dataclass(frozen=True)
class GeneratedSection:
    id: str
    type: str
    variant: SectionVariant
    order: int
    responsive: Dict[str, BreakpointRule]


@dataclass(frozen=True)
class SectionBreakpoint:
    section_id: str
    visible: bool
    order: int
    layout: str


@dataclass(frozen=True)
class LayoutBreakpoint:
    breakpoint: str
    layout: str
    sections: List[SectionBreakpoint]


@dataclass(frozen=True)
class GeneratedLayout:
    page_id: str
    blueprint: Blueprint
    selected_variant: LayoutVariant
    sections: List[GeneratedSection]
    responsive: Dict[str, LayoutBreakpoint]


# =============================================================================
# Synthesized content
# =============================================================================

@dataclass
class SectionCopy:
    headline: str
    subheadline: str = ""
    description: str = ""
    bullets: List[str] = field(default_factory=list)
    cta_text: str = ""
    cta_link: str = ""


@dataclass
class ImagePlan:
    id: str
    page_id: str
    section_id: str
    type: str
    purpose: str
    prompt: str
    width: int
    height: int
    aspect_ratio: str
    alt: str
    priority: str = "medium"
    quality: str = "hd"

    @property
    def size(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass
class GeneratedImage:
    plan_id: str
    page_id: str
    section_id: str
    alt: str
    url: Optional[str] = None
    local_path: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PageSEOData:
    title: str
    meta_description: str
    h1: str
    canonical: str
    keywords: List[str] = field(default_factory=list)
    og: Dict[str, str] = field(default_factory=dict)
    twitter: Dict[str, str] = field(default_factory=dict)
    schema: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SynthesizedContent:
    copies: Dict[str, SectionCopy] = field(default_factory=dict)  # "{page_id}-{section_id}" -> copy
    images: List[GeneratedImage] = field(default_factory=list)
    seo: Dict[str, PageSEOData] = field(default_factory=dict)  # page_id -> seo

    @staticmethod
    def key(page_id: str, section_id: str) -> str:
        return f"{page_id}-{section_id}"

    def copy_for(self, page_id: str, section_id: str) -> Optional[SectionCopy]:
        return self.copies.get(self.key(page_id, section_id))

    def images_for(self, page_id: str, section_id: str) -> List[GeneratedImage]:
        return [img for img in self.images if img.page_id == page_id and img.section_id == section_id]


# =============================================================================
# Progress and deployment
# =============================================================================

@dataclass(frozen=True)
class GenerationProgress:
    phase: int
    phase_name: str
    current_step: str
    progress: int
    message: str

    def to_event(self) -> Dict:
        return {
            "type": "progress",
            "phase": self.phase,
            "phaseName": self.phase_name,
            "currentStep": self.current_step,
            "progress": self.progress,
            "message": self.message,
        }


@dataclass
class DeploymentConfig:
    provider: str  # "zip" | "netlify" | "vercel"
    api_key: Optional[str] = None
    site_name: Optional[str] = None

    @staticmethod
    def from_dict(d):
        return DeploymentConfig(
            provider=d.get("provider", "zip"),
            api_key=d.get("apiKey") or d.get("api_key"),
            site_name=d.get("siteName") or d.get("site_name"),
        )


@dataclass
class DeploymentSummary:
    provider: str
    deployed_at: str
    files: int
    size: int
    pages: List[str] = field(default_factory=list)


@dataclass
class DeploymentResult:
    success: bool
    message: str
    summary: DeploymentSummary
    url: Optional[str] = None
    zip_path: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {
            "success": self.success,
            "message": self.message,
            "summary": {
                "provider": self.summary.provider,
                "deployedAt": self.summary.deployed_at,
                "files": self.summary.files,
                "size": self.summary.size,
                "pages": list(self.summary.pages),
            },
        }
        if self.url:
            data["url"] = self.url
        if self.zip_path:
            data["zipPath"] = self.zip_path
        return data
