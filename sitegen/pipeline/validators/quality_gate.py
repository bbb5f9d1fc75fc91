"""
Quality gate.
=============
Runs the five category assessments against an assembled site and reduces
them to a weighted composite, a verdict and a pass/fail decision.
"""
import asyncio
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ...domain import PlannedPage
from ...interfaces import IBrowserAutomation, IMetricsProvider, IPageHandle
from ..config import PipelineConfig, FileNames
from ..logger import PipelineLogger
from .assessments import assess_performance, assess_accessibility, assess_seo, assess_visual
from .metrics import PlaywrightMetricsProvider
from .navigation import NavigationIntegrityChecker
from .report import (
    QAReport, CategoryResult, NavigationMetrics, QAIssue, Recommendation,
)
from .server import HTTPServerContext

# name -> weight; weights sum to 1.0
CATEGORY_WEIGHTS = (
    ("Performance", 0.15),
    ("Accessibility", 0.15),
    ("SEO", 0.15),
    ("Visual Design", 0.25),
    ("Navigation", 0.30),
)

VERDICT_THRESHOLDS = (
    (9.5, "World-Class"),
    (8.5, "Excellent"),
    (7.5, "Good"),
    (6.0, "OK"),
)

PERFORMANCE_PASS = 80
SEO_PASS = 80
VISUAL_PASS = 7.5


class QualityAssessmentError(RuntimeError):
    """Any failure while assessing, including a navigation timeout."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"QA assessment failed: {reason}")


def determine_verdict(score: float) -> str:
    for threshold, verdict in VERDICT_THRESHOLDS:
        if score >= threshold:
            return verdict
    return "Poor"


def composite_score(categories: List[CategoryResult]) -> float:
    total_weight = sum(c.weight for c in categories)
    if total_weight <= 0:
        return 0.0
    score = sum(c.score * c.weight for c in categories) / total_weight
    return min(10.0, max(0.0, score))


def build_categories(performance: Dict, accessibility: Dict, seo: Dict, visual: Dict,
                     navigation: NavigationMetrics) -> List[CategoryResult]:
    weights = dict(CATEGORY_WEIGHTS)
    return [
        CategoryResult("Performance", performance["score"] / 10, weights["Performance"],
                       performance["score"] >= PERFORMANCE_PASS),
        CategoryResult("Accessibility", accessibility["score"] / 10, weights["Accessibility"],
                       accessibility["wcag"]["level"] != "none"),
        CategoryResult("SEO", seo["score"] / 10, weights["SEO"], seo["score"] >= SEO_PASS),
        CategoryResult("Visual Design", float(visual["score"]), weights["Visual Design"],
                       visual["score"] >= VISUAL_PASS),
        CategoryResult("Navigation", float(navigation.integrity_score), weights["Navigation"],
                       navigation.status == "pass"),
    ]


def identify_issues(categories: List[CategoryResult], performance: Dict, accessibility: Dict,
                    seo: Dict, visual: Dict, navigation: NavigationMetrics) -> List[QAIssue]:
    by_name = {c.name: c for c in categories}
    issues: List[QAIssue] = []

    if not by_name["Performance"].passed:
        issues.append(QAIssue("perf-1", "performance", "high",
                              f"Performance score is {performance['score']}/100", "global",
                              "Optimize images, minify CSS/JS, enable caching"))
    if not by_name["Accessibility"].passed:
        details = accessibility.get("issues", {})
        issues.append(QAIssue("a11y-1", "accessibility", "high",
                              f"Accessibility score is {accessibility['score']}/100 "
                              f"({details.get('altText', 0)} images missing alt text, "
                              f"{details.get('labels', 0)} unlabeled inputs)",
                              "global", "Add alt text, headings and form labels"))
    if not by_name["SEO"].passed:
        issues.append(QAIssue("seo-1", "seo", "high", f"SEO score is {seo['score']}/100", "global",
                              "Add missing meta tags, improve heading structure"))
    if not by_name["Visual Design"].passed:
        issues.append(QAIssue("visual-1", "visual", "medium",
                              f"Visual design score is {visual['score']}/10", "global",
                              "Add a hero section and clear calls to action"))

    if navigation.status == "fail":
        issues.append(QAIssue(
            "nav-1", "navigation", "critical",
            f"Navigation integrity check failed: {navigation.broken_links} of "
            f"{navigation.total_links} navigation links point to missing pages",
            "navigation", "Fix navigation links to point to existing HTML files",
        ))
        for index, nav_issue in enumerate(navigation.issues):
            issues.append(QAIssue(
                f"nav-{index + 2}", "navigation", nav_issue.severity,
                f'Broken link in {nav_issue.page}: "{nav_issue.link}" -> {nav_issue.href} ({nav_issue.reason})',
                nav_issue.page, f"Create {nav_issue.href} or fix link target",
            ))
    elif navigation.status == "warning":
        issues.append(QAIssue(
            "nav-warn-1", "navigation", "medium",
            f"Navigation integrity warning: {navigation.broken_links} broken link(s) found",
            "navigation", "Review and fix navigation links",
        ))
    return issues


def recommendations_for(issues: List[QAIssue]) -> List[Recommendation]:
    return [
        Recommendation(
            priority="high" if issue.severity in ("critical", "high") else "medium",
            category=issue.category,
            action=issue.suggestion,
            impact=f"Improves {issue.category} score",
        )
        for issue in issues
    ]


def build_report(performance: Dict, accessibility: Dict, seo: Dict, visual: Dict,
                 navigation: NavigationMetrics, iteration: int,
                 threshold: float = 8.0) -> QAReport:
    """Reduce raw assessment results to a QAReport. Pure; no I/O."""
    categories = build_categories(performance, accessibility, seo, visual, navigation)
    overall = composite_score(categories)
    issues = identify_issues(categories, performance, accessibility, seo, visual, navigation)
    meets = (
        all(c.passed for c in categories)
        and overall >= threshold
        and navigation.status == "pass"
    )
    return QAReport(
        overall_score=overall,
        verdict=determine_verdict(overall),
        categories=categories,
        navigation=navigation,
        issues=issues,
        recommendations=recommendations_for(issues),
        iteration=iteration,
        meets_thresholds=meets,
        details={
            "performance": performance,
            "accessibility": accessibility,
            "seo": seo,
            "visual": visual,
        },
    )


class QualityGate:
    """
    Assesses an assembled output directory.

    A fresh browser is acquired for every assessment and released on every
    exit path.
    """

    def __init__(self, browser_factory: Callable[[], IBrowserAutomation],
                 metrics: Optional[IMetricsProvider] = None,
                 config: Optional[PipelineConfig] = None,
                 logger: Optional[PipelineLogger] = None):
        self.browser_factory = browser_factory
        self.metrics = metrics or PlaywrightMetricsProvider()
        self.config = config or PipelineConfig()
        self.logger = logger or PipelineLogger("pipeline.quality", verbose=self.config.verbose)

    async def assess(self, output_dir: str, pages: List[PlannedPage], iteration: int = 1) -> QAReport:
        output_dir = os.path.abspath(output_dir)
        self.logger.step(f"Quality assessment #{iteration} of {output_dir}")
        try:
            if self.config.serve_output:
                async with HTTPServerContext(output_dir) as server:
                    report = await self._assess_url(server.url_for(FileNames.INDEX), output_dir, pages, iteration)
            else:
                url = Path(output_dir, FileNames.INDEX).as_uri()
                report = await self._assess_url(url, output_dir, pages, iteration)
        except QualityAssessmentError as e:
            self.logger.error(str(e))
            raise
        except Exception as e:
            self.logger.error(f"QA assessment failed: {e}")
            raise QualityAssessmentError(str(e) or type(e).__name__) from e

        self.logger.success(
            f"QA #{iteration}: {report.overall_score:.2f}/10 ({report.verdict}), "
            f"navigation {report.navigation.status}, meets thresholds: {report.meets_thresholds}"
        )
        for issue in report.issues:
            self.logger.issue(issue.severity, issue.category, issue.description)
        return report

    async def _assess_url(self, url: str, output_dir: str, pages: List[PlannedPage], iteration: int) -> QAReport:
        browser = self.browser_factory()
        page: Optional[IPageHandle] = None
        try:
            timeout_ms = self.config.qa_timeout_ms
            try:
                page = await asyncio.wait_for(browser.open(url, timeout_ms), timeout=timeout_ms / 1000)
            except asyncio.TimeoutError as e:
                raise QualityAssessmentError(f"navigation to {url} timed out after {timeout_ms}ms") from e

            checker = NavigationIntegrityChecker(output_dir)
            performance, accessibility, seo, visual, navigation = await asyncio.gather(
                assess_performance(page, self.metrics),
                assess_accessibility(page),
                assess_seo(page),
                assess_visual(page),
                asyncio.to_thread(checker.check, pages),
            )
            return build_report(performance, accessibility, seo, visual, navigation,
                                iteration, self.config.composite_threshold)
        finally:
            try:
                if page is not None:
                    await page.close()
            finally:
                await browser.close()
