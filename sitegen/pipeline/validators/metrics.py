"""
Performance metrics providers.
==============================
"""
from typing import Dict

from ...interfaces import IMetricsProvider, IPageHandle

# Largest Contentful Paint, first-input proxy and layout shift from the
# Performance API. Values the browser cannot report fall back to 0.
PERFORMANCE_PROBE = """() => {
  const nav = performance.getEntriesByType('navigation')[0];
  const lcpEntries = performance.getEntriesByType('largest-contentful-paint');
  const paint = performance.getEntriesByName('first-contentful-paint')[0];
  let cls = 0;
  for (const entry of performance.getEntriesByType('layout-shift')) {
    if (!entry.hadRecentInput) cls += entry.value;
  }
  const lcp = lcpEntries.length ? lcpEntries[lcpEntries.length - 1].startTime
            : (paint ? paint.startTime : (nav ? nav.domContentLoadedEventEnd : 0));
  return {
    lcp: lcp,
    fid: nav ? Math.max(0, nav.domInteractive - nav.responseEnd) : 0,
    cls: cls,
    loadTime: nav ? nav.loadEventEnd : 0,
  };
}"""


class PlaywrightMetricsProvider(IMetricsProvider):
    """Reads Navigation/Paint timing from the live page."""

    async def collect(self, page: IPageHandle) -> Dict[str, float]:
        raw = await page.evaluate(PERFORMANCE_PROBE) or {}
        return {key: float(raw.get(key) or 0) for key in ("lcp", "fid", "cls", "loadTime")}


class StaticMetricsProvider(IMetricsProvider):
    """Fixed metrics, for tests and offline runs."""

    def __init__(self, lcp: float = 1200.0, fid: float = 20.0, cls: float = 0.02, load_time: float = 800.0):
        self.values = {"lcp": lcp, "fid": fid, "cls": cls, "loadTime": load_time}

    async def collect(self, page: IPageHandle) -> Dict[str, float]:
        return dict(self.values)
