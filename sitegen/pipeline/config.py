"""
Pipeline configuration constants.
================================
Centralizes all magic numbers, file names, limits and the phase table.
"""
import os
from dataclasses import dataclass


class FileNames:
    """Standard file names for generated artifacts."""
    INDEX = "index.html"
    DEPLOYMENT_SUMMARY = "deployment-summary.md"
    QA_REPORT = "qa-report.json"


class IntermediateFiles:
    """Intermediate file names with consistent numbering."""
    PROJECT = "01_project_config.json"
    ARCHETYPE = "02_archetype.json"
    PAGE_PLAN = "03_page_plan.json"
    DESIGN_TOKENS = "04_design_tokens.json"
    LAYOUTS = "05_layouts.json"


class Limits:
    """Pipeline limits and thresholds."""
    MAX_CONCURRENCY = 3
    MAX_ITERATIONS = 5
    QA_TIMEOUT_MS = 30000
    COMPOSITE_THRESHOLD = 8.0


# (number, name, step, percent, message). External progress contract: do not renumber.
PHASES = (
    (1, "Intake", "Processing intake form", 3, "Collecting requirements..."),
    (2, "User Profile Extraction", "Extracting user profile", 6, "Analyzing user requirements..."),
    (3, "Industry Detection", "Detecting industry", 10, "Analyzing industry..."),
    (4, "Competitor Analysis", "Analyzing competitors", 13, "Researching competitors..."),
    (5, "Keyword Extraction", "Extracting keywords", 16, "Identifying keywords..."),
    (6, "Architecture Planning", "Planning architecture", 20, "Designing site structure..."),
    (7, "Page List Generation", "Generating pages", 23, "Creating page list..."),
    (8, "Content Structure Planning", "Planning content", 26, "Structuring content..."),
    (9, "SEO Strategy Mapping", "Mapping SEO strategy", 30, "Planning SEO..."),
    (10, "Design Tokens", "Generating design tokens", 33, "Creating design system..."),
    (11, "Typography System", "Generating typography", 36, "Designing typography..."),
    (12, "Color Palette Generation", "Generating colors", 40, "Creating color palette..."),
    (13, "Component Token Generation", "Generating components", 43, "Creating components..."),
    (14, "Layout Skeleton", "Creating layout skeleton", 46, "Designing layouts..."),
    (15, "AI Layout Variants", "Selecting variants", 50, "Optimizing layouts..."),
    (16, "Responsive Layouts", "Generating responsive", 53, "Making responsive..."),
    (17, "Image Planning", "Planning images", 56, "Planning images..."),
    (18, "Image Generation", "Generating images", 60, "Creating images..."),
    (19, "Copywriting", "Writing copy", 63, "Generating content..."),
    (20, "SEO Metadata", "Generating SEO", 66, "Optimizing SEO..."),
    (21, "Internal Linking", "Planning links", 70, "Creating link structure..."),
    (22, "HTML/CSS Generator", "Generating code", 73, "Building HTML/CSS..."),
    (23, "Multi-page Assembly", "Assembling pages", 76, "Assembling website..."),
    (24, "Accessibility Enhancements", "Enhancing accessibility", 80, "Improving accessibility..."),
    (25, "Performance Optimization", "Optimizing performance", 83, "Optimizing performance..."),
    (26, "Quality Test", "Testing quality", 86, "Running quality tests..."),
    (27, "Iteration", "Iterating", 90, "Improving quality..."),
    (28, "Deployment Preparation", "Preparing deployment", 93, "Preparing for deployment..."),
    (29, "Export/Deploy", "Deploying", 96, "Deploying website..."),
    (30, "Documentation", "Generating docs", 100, "Finalizing..."),
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PipelineConfig:
    """Runtime configuration for the pipeline."""
    max_concurrency: int = Limits.MAX_CONCURRENCY
    max_iterations: int = Limits.MAX_ITERATIONS
    qa_timeout_ms: int = Limits.QA_TIMEOUT_MS
    composite_threshold: float = Limits.COMPOSITE_THRESHOLD
    base_url: str = "https://example.com"
    output_root: str = "website_projects"
    output_subdir: str = "generated"
    headless: bool = True
    serve_output: bool = True
    save_intermediates: bool = False
    verbose: bool = True

    def output_dir_for(self, project_slug: str) -> str:
        return os.path.join(self.project_dir_for(project_slug), self.output_subdir)

    def project_dir_for(self, project_slug: str) -> str:
        return os.path.join(self.output_root, project_slug)

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a config from SITEGEN_* environment variables."""
        env = os.environ
        defaults = cls()
        return cls(
            max_concurrency=int(env.get("SITEGEN_MAX_CONCURRENCY", defaults.max_concurrency)),
            max_iterations=int(env.get("SITEGEN_MAX_ITERATIONS", defaults.max_iterations)),
            qa_timeout_ms=int(env.get("SITEGEN_QA_TIMEOUT_MS", defaults.qa_timeout_ms)),
            composite_threshold=float(env.get("SITEGEN_COMPOSITE_THRESHOLD", defaults.composite_threshold)),
            base_url=env.get("SITEGEN_BASE_URL", defaults.base_url),
            output_root=env.get("SITEGEN_OUTPUT_ROOT", defaults.output_root),
            output_subdir=env.get("SITEGEN_OUTPUT_SUBDIR", defaults.output_subdir),
            headless=_env_bool("SITEGEN_HEADLESS", defaults.headless),
            serve_output=_env_bool("SITEGEN_SERVE_OUTPUT", defaults.serve_output),
            save_intermediates=_env_bool("SITEGEN_SAVE_INTERMEDIATES", defaults.save_intermediates),
            verbose=_env_bool("SITEGEN_VERBOSE", defaults.verbose),
        )
