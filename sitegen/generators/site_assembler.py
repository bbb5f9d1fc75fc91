"""
Site assembly.
==============
Renders one HTML file per planned page plus the shared stylesheet, script,
image placeholders, sitemap.xml and robots.txt.
"""
import os
import json
import logging
from datetime import date
from html import escape
from typing import Dict, List, Optional

from ..domain import (
    ProjectConfig, PagePlan, PlannedPage, DesignTokens, GeneratedLayout,
    GeneratedSection, SynthesizedContent, SectionCopy, GeneratedImage, PageSEOData,
)

logger = logging.getLogger("generators.site_assembler")

STYLES_FILE = "styles.css"
SCRIPT_FILE = "script.js"
IMAGES_DIR = "images"
SITEMAP_FILE = "sitemap.xml"
ROBOTS_FILE = "robots.txt"

MEDIA_QUERIES = {
    "mobile": "@media (max-width: 768px)",
    "tablet": "@media (min-width: 769px) and (max-width: 1024px)",
    "desktop": "@media (min-width: 1025px)",
}

PLACEHOLDER_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" viewBox="0 0 {width} {height}" role="img" aria-label="{alt}">
  <rect width="100%" height="100%" fill="{background}"/>
  <text x="50%" y="50%" dominant-baseline="middle" text-anchor="middle" font-family="sans-serif" font-size="48" fill="{foreground}">{label}</text>
</svg>
"""

SCRIPT = """document.addEventListener('DOMContentLoaded', function () {
  var toggle = document.querySelector('.nav-toggle');
  var menu = document.querySelector('.nav-menu');
  if (toggle && menu) {
    toggle.addEventListener('click', function () {
      var open = menu.classList.toggle('open');
      toggle.setAttribute('aria-expanded', open ? 'true' : 'false');
    });
  }
  var form = document.querySelector('.contact-form');
  if (form) {
    form.addEventListener('submit', function (event) {
      event.preventDefault();
      var status = form.querySelector('.form-status');
      if (status) { status.textContent = 'Thank you, we will be in touch shortly.'; }
      form.reset();
    });
  }
});
"""


def render_sitemap(pages: List[PlannedPage], base_url: str, lastmod: Optional[str] = None) -> str:
    base = base_url.rstrip("/")
    lastmod = lastmod or date.today().isoformat()
    entries = []
    for page in sorted(pages, key=lambda p: p.order):
        loc = f"{base}/" if page.is_root else f"{base}/{page.filename}"
        priority = "1.0" if page.is_root else ("0.8" if page.required else "0.5")
        entries.append(
            "  <url>\n"
            f"    <loc>{escape(loc)}</loc>\n"
            f"    <lastmod>{lastmod}</lastmod>\n"
            f"    <changefreq>{'weekly' if page.is_root else 'monthly'}</changefreq>\n"
            f"    <priority>{priority}</priority>\n"
            "  </url>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + "\n".join(entries)
        + "\n</urlset>\n"
    )


def render_robots(base_url: str) -> str:
    return (
        "User-agent: *\n"
        "Allow: /\n"
        "Disallow: /admin\n"
        "Disallow: /api\n"
        "\n"
        f"Sitemap: {base_url.rstrip('/')}/{SITEMAP_FILE}\n"
    )


class SiteAssembler:
    """Writes the assembled site for a project into an output directory."""

    def __init__(self, base_url: str = "https://example.com"):
        self.base_url = base_url.rstrip("/")

    def assemble(self, project: ProjectConfig, plan: PagePlan, tokens: DesignTokens,
                 layouts: Dict[str, GeneratedLayout], content: SynthesizedContent,
                 output_dir: str, only: Optional[List[str]] = None) -> List[str]:
        """
        Render and write pages.

        Args:
            only: page ids to (re)write; shared assets are always rewritten

        Returns:
            Written file names relative to output_dir
        """
        os.makedirs(os.path.join(output_dir, IMAGES_DIR), exist_ok=True)
        written = []

        self._write_placeholders(content.images, tokens, output_dir)

        for page in plan.pages:
            if only is not None and page.id not in only:
                continue
            layout = layouts.get(page.id)
            html = self.render_page(page, plan, project, layout, content)
            self._write(output_dir, page.filename, html)
            written.append(page.filename)

        self._write(output_dir, STYLES_FILE, self.render_styles(tokens, layouts))
        self._write(output_dir, SCRIPT_FILE, SCRIPT)
        written.extend([STYLES_FILE, SCRIPT_FILE])
        logger.debug("assembled %d files into %s", len(written), output_dir)
        return written

    def missing_pages(self, plan: PagePlan, output_dir: str) -> List[str]:
        return [p.id for p in plan.pages if not os.path.isfile(os.path.join(output_dir, p.filename))]

    def write_seo_files(self, pages: List[PlannedPage], output_dir: str) -> List[str]:
        self._write(output_dir, SITEMAP_FILE, render_sitemap(pages, self.base_url))
        self._write(output_dir, ROBOTS_FILE, render_robots(self.base_url))
        return [SITEMAP_FILE, ROBOTS_FILE]

    def _write(self, output_dir: str, filename: str, text: str):
        with open(os.path.join(output_dir, filename), "w", encoding="utf-8") as f:
            f.write(text)

    def _write_placeholders(self, images: List[GeneratedImage], tokens: DesignTokens, output_dir: str):
        for image in images:
            if image.url:
                continue
            filename = f"{image.plan_id}.svg"
            svg = PLACEHOLDER_SVG.format(
                width=image.metadata.get("width", 1024),
                height=image.metadata.get("height", 1024),
                alt=escape(image.alt, quote=True),
                background=tokens.colors.primary["100"],
                foreground=tokens.colors.primary["700"],
                label=escape(image.section_id.title()),
            )
            self._write(output_dir, os.path.join(IMAGES_DIR, filename), svg)
            image.local_path = f"{IMAGES_DIR}/{filename}"

    # -------------------------------------------------------------------------
    # HTML
    # -------------------------------------------------------------------------

    def render_page(self, page: PlannedPage, plan: PagePlan, project: ProjectConfig,
                    layout: Optional[GeneratedLayout], content: SynthesizedContent) -> str:
        seo = content.seo.get(page.id)
        sections = layout.sections if layout else []
        body = "\n".join(self._render_section(page, s, project, content, seo) for s in sections)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
{self._render_head(page, project, seo, content)}
</head>
<body class="page-{escape(page.id)}">
  <a class="skip-link" href="#main">Skip to content</a>
{self._render_header(page, plan, project)}
  <main id="main">
{body}
  </main>
{self._render_footer(plan, project)}
  <script src="{SCRIPT_FILE}" defer></script>
</body>
</html>
"""

    def _render_head(self, page: PlannedPage, project: ProjectConfig, seo: Optional[PageSEOData],
                     content: SynthesizedContent) -> str:
        title = seo.title if seo else f"{page.title} | {project.project_name}"
        description = seo.meta_description if seo else (page.seo.description if page.seo else page.title)
        canonical = seo.canonical if seo else f"{self.base_url}/{page.filename}"
        hero = next(iter(content.images_for(page.id, "hero")), None)
        og_image = hero.url if hero and hero.url else ""
        lines = [
            '  <meta charset="UTF-8">',
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
            f"  <title>{escape(title)}</title>",
            f'  <meta name="description" content="{escape(description, quote=True)}">',
            f'  <link rel="canonical" href="{escape(canonical, quote=True)}">',
        ]
        if seo and seo.keywords:
            lines.append(f'  <meta name="keywords" content="{escape(", ".join(seo.keywords), quote=True)}">')
        if seo:
            og = dict(seo.og, image=og_image or seo.og.get("image", ""))
            for key, value in og.items():
                if value:
                    lines.append(f'  <meta property="og:{key}" content="{escape(str(value), quote=True)}">')
            for key, value in seo.twitter.items():
                if value:
                    lines.append(f'  <meta name="twitter:{key}" content="{escape(str(value), quote=True)}">')
            if seo.schema:
                payload = json.dumps(seo.schema, indent=2).replace("</", "<\\/")
                lines.append(f'  <script type="application/ld+json">\n{payload}\n  </script>')
        lines.append(f'  <link rel="stylesheet" href="{STYLES_FILE}">')
        return "\n".join(lines)

    def _render_header(self, page: PlannedPage, plan: PagePlan, project: ProjectConfig) -> str:
        items = []
        for item in plan.navigation.primary:
            current = ' aria-current="page"' if item.slug == page.slug else ""
            items.append(f'        <li><a href="{escape(item.href, quote=True)}"{current}>{escape(item.label)}</a></li>')
        return f"""  <header class="site-header">
    <div class="container header-inner">
      <a class="brand" href="index.html">{escape(project.project_name)}</a>
      <button class="nav-toggle" aria-expanded="false" aria-controls="primary-nav" aria-label="Toggle navigation">Menu</button>
      <nav class="nav-menu" id="primary-nav" aria-label="Primary">
      <ul>
{chr(10).join(items)}
      </ul>
      </nav>
    </div>
  </header>"""

    def _render_footer(self, plan: PagePlan, project: ProjectConfig) -> str:
        items = "\n".join(
            f'        <li><a href="{escape(item.href, quote=True)}">{escape(item.label)}</a></li>'
            for item in plan.navigation.footer
        )
        contact = []
        if project.contact_email:
            contact.append(f'<a href="mailto:{escape(project.contact_email, quote=True)}">{escape(project.contact_email)}</a>')
        if project.contact_phone:
            contact.append(f'<a href="tel:{escape(project.contact_phone, quote=True)}">{escape(project.contact_phone)}</a>')
        if project.location.label():
            contact.append(f"<span>{escape(project.location.label())}</span>")
        contact_html = f'\n      <p class="footer-contact">{" | ".join(contact)}</p>' if contact else ""
        return f"""  <footer class="site-footer">
    <div class="container">
      <nav class="footer-nav" aria-label="Footer">
      <ul>
{items}
      </ul>
      </nav>{contact_html}
      <p class="copyright">&copy; {date.today().year} {escape(project.project_name)}</p>
    </div>
  </footer>"""

    def _render_section(self, page: PlannedPage, section: GeneratedSection, project: ProjectConfig,
                        content: SynthesizedContent, seo: Optional[PageSEOData]) -> str:
        copy = content.copy_for(page.id, section.id) or SectionCopy(headline=page.title)
        images = content.images_for(page.id, section.id)
        classes = f"section section-{escape(section.id)} {escape(section.type)} layout-{escape(section.variant.layout)}"
        open_tag = f'    <section id="{escape(section.id)}" class="{classes}" data-order="{section.order}">'

        if section.type == "hero":
            heading = seo.h1 if seo and seo.h1 else copy.headline
            inner = [f"      <h1>{escape(heading)}</h1>"]
            if copy.headline and copy.headline != heading:
                inner.append(f'      <p class="eyebrow">{escape(copy.headline)}</p>')
        else:
            inner = [f"      <h2>{escape(copy.headline)}</h2>"]

        if copy.subheadline:
            inner.append(f'      <p class="lead">{escape(copy.subheadline)}</p>')
        if copy.description:
            inner.append(f"      <p>{escape(copy.description)}</p>")
        if copy.bullets:
            cards = "\n".join(
                f'        <article class="card"><h3>{escape(b)}</h3></article>' for b in copy.bullets
            )
            inner.append(f'      <div class="grid">\n{cards}\n      </div>')
        if section.type == "contact":
            inner.append(self._render_contact_form(copy))
        elif copy.cta_text and copy.cta_link:
            inner.append(f'      <a class="cta-button" href="{escape(copy.cta_link, quote=True)}">{escape(copy.cta_text)}</a>')
        for image in images:
            src = image.url or image.local_path
            if src:
                inner.append(
                    f'      <img src="{escape(src, quote=True)}" alt="{escape(image.alt, quote=True)}" '
                    f'width="{image.metadata.get("width", "")}" height="{image.metadata.get("height", "")}" loading="lazy">'
                )
        return "\n".join([open_tag] + inner + ["    </section>"])

    def _render_contact_form(self, copy: SectionCopy) -> str:
        return f"""      <form class="contact-form" novalidate>
        <label for="contact-name">Name</label>
        <input id="contact-name" name="name" type="text" autocomplete="name" required>
        <label for="contact-email">Email</label>
        <input id="contact-email" name="email" type="email" autocomplete="email" required>
        <label for="contact-message">Message</label>
        <textarea id="contact-message" name="message" rows="5" required></textarea>
        <button type="submit" class="cta-button">{escape(copy.cta_text or "Send Message")}</button>
        <p class="form-status" role="status"></p>
      </form>"""

    # -------------------------------------------------------------------------
    # CSS
    # -------------------------------------------------------------------------

    def render_styles(self, tokens: DesignTokens, layouts: Dict[str, GeneratedLayout]) -> str:
        colors = tokens.colors
        typography = tokens.typography
        variables = []
        for name, scale in (("primary", colors.primary), ("secondary", colors.secondary),
                            ("accent", colors.accent), ("neutral", colors.neutral)):
            variables.extend(f"  --color-{name}-{shade}: {value};" for shade, value in scale.items())
        variables.extend(f"  --color-{name}: {value};" for name, value in colors.semantic.items())
        variables.extend(f"  --space-{step}: {value};" for step, value in tokens.spacing.items())
        variables.extend(f"  --shadow-{name}: {value};" for name, value in tokens.shadows.items())
        variables.extend(f"  --radius-{name}: {value};" for name, value in tokens.theme["borderRadius"].items())
        variables.extend(f"  --text-{name}: {value};" for name, value in typography["fontSizes"].items())
        variables.append(f"  --font-heading: {typography['fontFamilies']['heading']};")
        variables.append(f"  --font-body: {typography['fontFamilies']['body']};")
        variables.append(f"  --transition: {tokens.theme['transitions']['normal']};")

        button = tokens.components["button"]["primary"]
        base = f""":root {{
{chr(10).join(variables)}
}}

* {{ box-sizing: border-box; }}
body {{ margin: 0; font-family: var(--font-body); color: var(--color-neutral-900); line-height: 1.5; }}
h1, h2, h3 {{ font-family: var(--font-heading); line-height: 1.25; }}
h1 {{ font-size: var(--text-5xl); }}
h2 {{ font-size: var(--text-3xl); }}
img {{ max-width: 100%; height: auto; border-radius: var(--radius-lg); }}
.container {{ max-width: 1200px; margin: 0 auto; padding: 0 var(--space-4); }}
.skip-link {{ position: absolute; left: -9999px; }}
.skip-link:focus {{ left: var(--space-4); top: var(--space-4); }}
.site-header {{ border-bottom: 1px solid var(--color-neutral-200); }}
.header-inner {{ display: flex; align-items: center; justify-content: space-between; padding: var(--space-4); }}
.brand {{ font-weight: 700; color: var(--color-primary-700); text-decoration: none; }}
.nav-menu ul, .footer-nav ul {{ list-style: none; display: flex; gap: var(--space-6); margin: 0; padding: 0; }}
.nav-menu a, .footer-nav a {{ color: var(--color-neutral-800); text-decoration: none; }}
.nav-menu a[aria-current="page"] {{ color: var(--color-primary-600); font-weight: 600; }}
.nav-toggle {{ display: none; }}
main {{ display: flex; flex-direction: column; }}
.section {{ padding: var(--space-16) var(--space-4); max-width: 1200px; margin: 0 auto; width: 100%; }}
.hero {{ background: var(--color-primary-50); max-width: none; }}
.lead {{ font-size: var(--text-xl); color: var(--color-neutral-700); }}
.grid {{ display: grid; gap: var(--space-6); }}
.card {{ background: #ffffff; border-radius: var(--radius-lg); padding: var(--space-6); box-shadow: var(--shadow-md); }}
.cta-button {{ display: inline-block; background: {button['backgroundColor']}; color: {button['textColor']}; padding: {button['padding']}; border-radius: {button['borderRadius']}; font-weight: {button['fontWeight']}; text-decoration: none; border: 0; cursor: pointer; transition: background var(--transition); }}
.cta-button:hover {{ background: var(--color-primary-700); }}
.contact-form {{ display: grid; gap: var(--space-2); max-width: 36rem; }}
.contact-form input, .contact-form textarea {{ padding: var(--space-3); border: 1px solid var(--color-neutral-300); border-radius: var(--radius-md); font: inherit; }}
.site-footer {{ background: var(--color-neutral-900); color: var(--color-neutral-100); padding: var(--space-12) 0; }}
.site-footer a {{ color: var(--color-neutral-100); }}
"""
        return base + "\n" + self._responsive_css(layouts)

    def _responsive_css(self, layouts: Dict[str, GeneratedLayout]) -> str:
        blocks = []
        for breakpoint, query in MEDIA_QUERIES.items():
            rules = []
            if breakpoint == "mobile":
                rules.append("  .nav-toggle { display: inline-block; }")
                rules.append("  .nav-menu { display: none; width: 100%; }")
                rules.append("  .nav-menu.open { display: block; }")
                rules.append("  .nav-menu ul { flex-direction: column; }")
                rules.append("  h1 { font-size: var(--text-3xl); }")
            for page_id, layout in layouts.items():
                projection = layout.responsive.get(breakpoint)
                if projection is None:
                    continue
                for entry in projection.sections:
                    selector = f".page-{page_id} .section-{entry.section_id}"
                    display = "" if entry.visible else " display: none;"
                    rules.append(f"  {selector} {{ order: {entry.order};{display} }}")
                    columns = self._columns(entry.layout)
                    if columns:
                        rules.append(f"  {selector} .grid {{ grid-template-columns: repeat({columns}, 1fr); }}")
            blocks.append(f"{query} {{\n" + "\n".join(rules) + "\n}")
        return "\n\n".join(blocks) + "\n"

    @staticmethod
    def _columns(layout: str) -> int:
        if layout.startswith("grid-"):
            try:
                return int(layout.split("-", 1)[1])
            except ValueError:
                return 0
        return 1 if layout in ("stack", "single") else 0
