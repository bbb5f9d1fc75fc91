"""
Page-level quality assessments.
===============================
Performance, accessibility and SEO score 0-100; visual scores 0-10.
Each probe is a single page.evaluate() call.
"""
from typing import Any, Dict

from ...interfaces import IPageHandle, IMetricsProvider

ACCESSIBILITY_PROBE = """() => {
  const images = Array.from(document.querySelectorAll('img'));
  const inputs = Array.from(document.querySelectorAll('input, textarea, select'))
    .filter(el => el.type !== 'hidden');
  const labeled = inputs.filter(el =>
    el.getAttribute('aria-label') ||
    el.closest('label') ||
    (el.id && document.querySelector('label[for="' + el.id + '"]'))
  );
  return {
    images: images.length,
    imagesWithAlt: images.filter(img => img.getAttribute('alt')).length,
    headings: document.querySelectorAll('h1, h2, h3, h4, h5, h6').length,
    inputs: inputs.length,
    labeledInputs: labeled.length,
    lang: document.documentElement.getAttribute('lang') || '',
  };
}"""

SEO_PROBE = """() => {
  const meta = name => {
    const el = document.querySelector('meta[name="' + name + '"]');
    return el ? (el.getAttribute('content') || '') : '';
  };
  const og = prop => {
    const el = document.querySelector('meta[property="og:' + prop + '"]');
    return el ? (el.getAttribute('content') || '') : '';
  };
  return {
    title: (document.querySelector('title') || {}).textContent || '',
    description: meta('description'),
    keywords: meta('keywords'),
    ogTitle: og('title'),
    ogDescription: og('description'),
    h1: document.querySelector('h1') !== null,
    headings: document.querySelectorAll('h1, h2, h3').length,
    schema: document.querySelector('script[type="application/ld+json"]') !== null,
    canonical: document.querySelector('link[rel="canonical"]') !== null,
  };
}"""

VISUAL_PROBE = """() => ({
  hero: document.querySelector('.hero, [class*="hero"], section:first-of-type') !== null,
  ctas: document.querySelectorAll('button, a[class*="cta"], a[class*="button"]').length,
})"""


def wcag_level(score: int) -> str:
    if score >= 90:
        return "AA"
    if score >= 75:
        return "A"
    return "none"


async def assess_performance(page: IPageHandle, metrics: IMetricsProvider) -> Dict[str, Any]:
    vitals = await metrics.collect(page)
    lcp, fid, cls = vitals.get("lcp", 0), vitals.get("fid", 0), vitals.get("cls", 0)

    score = 100
    if lcp > 2500:
        score -= 20
    if lcp > 4000:
        score -= 20
    if fid > 100:
        score -= 10
    if cls > 0.25:
        score -= 10

    return {
        "score": max(0, score),
        "coreWebVitals": {"lcp": lcp, "fid": fid, "cls": cls},
        "loadTime": vitals.get("loadTime", 0),
    }


async def assess_accessibility(page: IPageHandle) -> Dict[str, Any]:
    probe = await page.evaluate(ACCESSIBILITY_PROBE) or {}
    images = probe.get("images", 0)
    with_alt = probe.get("imagesWithAlt", 0)
    inputs = probe.get("inputs", 0)
    labeled = probe.get("labeledInputs", 0)
    has_headings = probe.get("headings", 0) > 0

    score = 100
    if not has_headings:
        score -= 20
    if images > 0 and with_alt < images:
        score -= 15
    if inputs > 0 and labeled < inputs:
        score -= 15
    score = max(0, score)

    return {
        "score": score,
        "wcag": {"level": wcag_level(score)},
        "issues": {
            "altText": images - with_alt,
            "headings": 0 if has_headings else 1,
            "labels": inputs - labeled,
        },
    }


async def assess_seo(page: IPageHandle) -> Dict[str, Any]:
    probe = await page.evaluate(SEO_PROBE) or {}

    score = 100
    if not probe.get("title"):
        score -= 20
    if not probe.get("description"):
        score -= 20
    if not probe.get("h1"):
        score -= 15
    if probe.get("headings", 0) < 3:
        score -= 10
    if not probe.get("schema"):
        score -= 10

    return {
        "score": max(0, score),
        "metaTags": {
            "title": bool(probe.get("title")),
            "description": bool(probe.get("description")),
            "keywords": bool(probe.get("keywords")),
            "og": bool(probe.get("ogTitle") and probe.get("ogDescription")),
        },
        "structure": {
            "h1": bool(probe.get("h1")),
            "headings": probe.get("headings", 0) > 0,
            "schema": bool(probe.get("schema")),
            "canonical": bool(probe.get("canonical")),
        },
    }


async def assess_visual(page: IPageHandle) -> Dict[str, Any]:
    probe = await page.evaluate(VISUAL_PROBE) or {}
    score = 7.0
    if probe.get("hero"):
        score += 1.0
    if probe.get("ctas", 0) > 0:
        score += 1.0
    return {
        "score": min(10.0, score),
        "hero": bool(probe.get("hero")),
        "ctas": probe.get("ctas", 0),
    }
