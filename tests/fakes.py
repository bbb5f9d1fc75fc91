"""
In-process stand-ins for the browser automation port.

FakePage answers the assessment probes by parsing the rendered HTML with
BeautifulSoup, so quality-gate tests run against real assembler output
without Chromium.
"""
import asyncio
import os
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse, unquote

from bs4 import BeautifulSoup

from sitegen.domain import SynthesizedContent
from sitegen.generators import (
    DeterministicGenerator, PagePlanner, DesignTokenGenerator, LayoutSelector, ContentSynthesizer,
)
from sitegen.interfaces import IBrowserAutomation, IPageHandle
from sitegen.pipeline.validators.assessments import ACCESSIBILITY_PROBE, SEO_PROBE, VISUAL_PROBE


def _meta(soup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    return tag.get("content", "") if tag else ""


def _labeled(soup, field) -> bool:
    if field.get("aria-label") or field.find_parent("label"):
        return True
    return bool(field.get("id") and soup.find("label", attrs={"for": field["id"]}))


def probe_html(html: str, script: str) -> Dict[str, Any]:
    soup = BeautifulSoup(html, "html.parser")
    if script == ACCESSIBILITY_PROBE:
        images = soup.find_all("img")
        fields = [f for f in soup.find_all(["input", "textarea", "select"]) if f.get("type") != "hidden"]
        return {
            "images": len(images),
            "imagesWithAlt": sum(1 for img in images if img.get("alt")),
            "headings": len(soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])),
            "inputs": len(fields),
            "labeledInputs": sum(1 for f in fields if _labeled(soup, f)),
            "lang": soup.html.get("lang", "") if soup.html else "",
        }
    if script == SEO_PROBE:
        return {
            "title": soup.title.get_text() if soup.title else "",
            "description": _meta(soup, name="description"),
            "keywords": _meta(soup, name="keywords"),
            "ogTitle": _meta(soup, property="og:title"),
            "ogDescription": _meta(soup, property="og:description"),
            "h1": soup.find("h1") is not None,
            "headings": len(soup.find_all(["h1", "h2", "h3"])),
            "schema": soup.find("script", attrs={"type": "application/ld+json"}) is not None,
            "canonical": soup.find("link", attrs={"rel": "canonical"}) is not None,
        }
    if script == VISUAL_PROBE:
        return {
            "hero": soup.select_one('.hero, [class*="hero"], section') is not None,
            "ctas": len(soup.select('button, a[class*="cta"], a[class*="button"]')),
        }
    return {}


class FakePage(IPageHandle):
    def __init__(self, html: str, browser: "FakeBrowser"):
        self.html = html
        self.browser = browser
        self.closed = False

    async def evaluate(self, script: str) -> Any:
        if self.browser.evaluate_error is not None:
            raise self.browser.evaluate_error
        return probe_html(self.html, script)

    async def content(self) -> str:
        return self.html

    async def close(self):
        self.closed = True
        self.browser.pages_closed += 1


class FakeBrowser(IBrowserAutomation):
    """file:// URLs are read directly; http:// URLs resolve to files under output_dir."""

    def __init__(self, output_dir: Optional[str] = None, open_delay: float = 0.0,
                 open_error: Optional[Exception] = None,
                 evaluate_error: Optional[Exception] = None):
        self.output_dir = output_dir
        self.open_delay = open_delay
        self.open_error = open_error
        self.evaluate_error = evaluate_error
        self.opened: List[str] = []
        self.pages_closed = 0
        self.closed = False

    async def open(self, url: str, timeout_ms: int) -> IPageHandle:
        self.opened.append(url)
        if self.open_delay:
            await asyncio.sleep(self.open_delay)
        if self.open_error is not None:
            raise self.open_error
        parsed = urlparse(url)
        path = unquote(parsed.path)
        if parsed.scheme != "file":
            path = os.path.join(self.output_dir or "", os.path.basename(path) or "index.html")
        with open(path, "r", encoding="utf-8") as f:
            return FakePage(f.read(), self)

    async def close(self):
        self.closed = True


class BrowserFactory:
    """Callable factory that remembers every browser it handed out."""

    def __init__(self, output_dir: Optional[str] = None, **kwargs):
        self.output_dir = output_dir
        self.kwargs = kwargs
        self.browsers: List[FakeBrowser] = []

    def __call__(self) -> FakeBrowser:
        browser = FakeBrowser(self.output_dir, **self.kwargs)
        self.browsers.append(browser)
        return browser


def deterministic_site(project, archetype, base_url="https://example.com"):
    """Plan, tokens, layouts and content for a project using deterministic generation only."""
    generator = DeterministicGenerator()
    plan = PagePlanner().plan(project, archetype)
    tokens = DesignTokenGenerator().generate(project, archetype)
    selector = LayoutSelector(generator)
    layouts = {page.id: selector.select(page, project, archetype) for page in plan.pages}

    synthesizer = ContentSynthesizer(generator, base_url=base_url)
    content = SynthesizedContent()
    content.images = [
        synthesizer.generate_image(image_plan)
        for image_plan in synthesizer.plan_images(layouts, project, archetype, tokens)
    ]
    for page in plan.pages:
        for section in layouts[page.id].sections:
            content.copies[SynthesizedContent.key(page.id, section.id)] = synthesizer.write_copy(
                page, section, project, archetype)
        content.seo[page.id] = synthesizer.page_seo(page, project, archetype)
    return plan, tokens, layouts, content
