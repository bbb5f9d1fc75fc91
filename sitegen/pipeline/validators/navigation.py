"""
Navigation integrity validation.
================================
Checks that every internal link in each page's rendered navigation
resolves to a file in the output directory.
"""
import math
import os
from typing import List, Optional
from urllib.parse import unquote

from bs4 import BeautifulSoup

from ...domain import PlannedPage
from .report import NavigationIssue, NavigationMetrics

NAV_LINK_SELECTOR = "nav a[href], .navigation a[href], .nav-menu a[href]"
SKIPPED_PREFIXES = ("http://", "https://", "mailto:", "tel:", "#", "javascript:")
INDEX_FILE = "index.html"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def integrity_score(total: int, working: int, broken: int) -> int:
    """0-10 score: working share of internal links, 0 with only missing files, else 10."""
    if total > 0:
        return round_half_up(working / total * 10)
    if broken > 0:
        return 0
    return 10


def integrity_status(score: int) -> str:
    if score < 8:
        return "fail"
    if score < 10:
        return "warning"
    return "pass"


class NavigationIntegrityChecker:
    """
    File-based navigation check over an assembled output directory.

    Pages are visited in plan order and links in document order, so the
    first broken link reported as critical is stable across runs.
    """

    def __init__(self, output_dir: str):
        self.output_dir = os.path.abspath(output_dir)

    def check(self, pages: List[PlannedPage]) -> NavigationMetrics:
        issues: List[NavigationIssue] = []
        total = working = broken = 0
        broken_link_seen = False

        for page in pages:
            filename = page.filename
            path = os.path.join(self.output_dir, filename)
            if not os.path.isfile(path):
                issues.append(NavigationIssue(
                    page=filename,
                    link=page.title,
                    href=filename,
                    reason=f"Page file {filename} does not exist",
                    severity="critical",
                ))
                broken += 1
                broken_link_seen = True
                continue

            with open(path, "r", encoding="utf-8") as f:
                soup = BeautifulSoup(f.read(), "html.parser")

            for anchor in self._nav_links(soup):
                href = (anchor.get("href") or "").strip()
                if href.startswith(SKIPPED_PREFIXES):
                    continue

                total += 1
                target = self.resolve(href)
                if target is not None and os.path.isfile(target):
                    working += 1
                    continue

                broken += 1
                issues.append(NavigationIssue(
                    page=filename,
                    link=anchor.get_text(strip=True) or href,
                    href=href,
                    reason=f"Target file {href} does not exist",
                    severity="high" if broken_link_seen else "critical",
                ))
                broken_link_seen = True

        score = integrity_score(total, working, broken)
        return NavigationMetrics(
            integrity_score=score,
            status=integrity_status(score),
            total_links=total,
            working_links=working,
            broken_links=broken,
            issues=issues,
        )

    @staticmethod
    def _nav_links(soup: BeautifulSoup):
        # select() returns document order; an anchor matching several selectors is counted once
        seen = set()
        for anchor in soup.select(NAV_LINK_SELECTOR):
            if id(anchor) in seen:
                continue
            seen.add(id(anchor))
            yield anchor

    def resolve(self, href: str) -> Optional[str]:
        """Map an internal href to a filesystem path inside the output dir, or None if it escapes."""
        path = unquote(href.split("#", 1)[0].split("?", 1)[0])
        if path in ("", "/"):
            path = INDEX_FILE
        relative = path.lstrip("/")
        target = os.path.normpath(os.path.join(self.output_dir, relative))
        if target != self.output_dir and not target.startswith(self.output_dir + os.sep):
            return None
        if os.path.isdir(target):
            target = os.path.join(target, INDEX_FILE)
        return target
