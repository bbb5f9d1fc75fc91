import asyncio
import os
import shutil
import tempfile
import time
import unittest

import httpx
import pytest

from sitegen.domain import ProjectConfig, Service, ArchetypeProfile
from sitegen.generators import SiteAssembler
from sitegen.pipeline.config import PipelineConfig
from sitegen.pipeline.validators import (
    QualityGate, QualityAssessmentError, StaticMetricsProvider, NavigationMetrics, build_report,
    HTTPServerContext,
)
from sitegen.pipeline.validators.quality_gate import (
    CATEGORY_WEIGHTS, composite_score, determine_verdict, build_categories,
)

from tests.fakes import BrowserFactory, deterministic_site

PERFECT = {
    "performance": {"score": 100},
    "accessibility": {"score": 100, "wcag": {"level": "AA"}, "issues": {}},
    "seo": {"score": 100},
    "visual": {"score": 10.0},
}


def navigation(score, status, total=10, broken=0):
    return NavigationMetrics(integrity_score=score, status=status, total_links=total,
                             working_links=total - broken, broken_links=broken)


def report_for(nav, **overrides):
    parts = dict(PERFECT, **overrides)
    return build_report(parts["performance"], parts["accessibility"], parts["seo"], parts["visual"], nav, 1)


def test_weights_sum_to_one():
    assert sum(weight for _, weight in CATEGORY_WEIGHTS) == pytest.approx(1.0)
    assert len(CATEGORY_WEIGHTS) == 5


@pytest.mark.parametrize("scores", [
    (0, 0, 0, 0, 0),
    (100, 100, 100, 10, 10),
    (250, -40, 100, 14, 10),
])
def test_composite_within_bounds(scores):
    perf, a11y, seo, visual, nav = scores
    categories = build_categories(
        {"score": perf}, {"score": a11y, "wcag": {"level": "A"}}, {"score": seo}, {"score": visual},
        navigation(nav, "pass"),
    )
    assert 0.0 <= composite_score(categories) <= 10.0


@pytest.mark.parametrize("score,verdict", [
    (9.7, "World-Class"), (9.0, "Excellent"), (8.0, "Good"), (6.5, "OK"), (3.0, "Poor"),
])
def test_verdicts(score, verdict):
    assert determine_verdict(score) == verdict


class TestBuildReport(unittest.TestCase):

    def test_all_pass(self):
        report = report_for(navigation(10, "pass"))
        self.assertTrue(report.meets_thresholds)
        self.assertAlmostEqual(report.overall_score, 10.0)
        self.assertEqual(report.verdict, "World-Class")
        self.assertEqual(report.issues, [])

    def test_navigation_fail_blocks_gate(self):
        report = report_for(navigation(5, "fail", broken=5))
        self.assertFalse(report.meets_thresholds)
        self.assertFalse(report.category("Navigation").passed)
        self.assertTrue(all(report.category(n).passed for n in ("Performance", "Accessibility", "SEO", "Visual Design")))
        self.assertEqual(report.issues[0].severity, "critical")

    def test_navigation_warning_blocks_gate(self):
        report = report_for(navigation(9, "warning", broken=1))
        self.assertGreaterEqual(report.overall_score, 8.0)
        self.assertFalse(report.meets_thresholds)
        self.assertEqual(report.issues[0].id, "nav-warn-1")

    def test_low_category_blocks_gate(self):
        report = report_for(navigation(10, "pass"), seo={"score": 60})
        self.assertFalse(report.meets_thresholds)
        self.assertEqual([i.category for i in report.issues], ["seo"])
        self.assertEqual(report.recommendations[0].priority, "high")

    def test_wire_format(self):
        data = report_for(navigation(10, "pass")).to_dict()
        self.assertEqual(data["meetsThresholds"], True)
        self.assertEqual(data["navigation"]["status"], "pass")
        self.assertEqual(len(data["categories"]), 5)


class TestQualityGate(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.output_dir = tempfile.mkdtemp()
        self.project = ProjectConfig(project_name="Harbor Law", project_slug="harbor-law",
                                     industry="Legal Services", services=[Service("Probate")])
        archetype = ArchetypeProfile(industry="Legal Services", detected_industry="Legal Services",
                                     confidence=0.7, archetype="legal")
        self.plan, tokens, layouts, content = deterministic_site(self.project, archetype)
        SiteAssembler().assemble(self.project, self.plan, tokens, layouts, content, self.output_dir)
        self.config = PipelineConfig(serve_output=False, verbose=False, qa_timeout_ms=200)

    def tearDown(self):
        shutil.rmtree(self.output_dir)

    def gate(self, factory):
        return QualityGate(factory, metrics=StaticMetricsProvider(), config=self.config)

    async def test_assembled_site_passes(self):
        factory = BrowserFactory()
        report = await self.gate(factory).assess(self.output_dir, self.plan.pages)
        self.assertTrue(report.meets_thresholds, report.to_dict())
        self.assertEqual(report.navigation.status, "pass")
        self.assertEqual(report.navigation.integrity_score, 10)
        self.assertTrue(factory.browsers[0].opened[0].startswith("file://"))
        self.assertTrue(factory.browsers[0].closed)
        self.assertEqual(factory.browsers[0].pages_closed, 1)

    async def test_served_over_http(self):
        self.config.serve_output = True
        factory = BrowserFactory(self.output_dir)
        report = await self.gate(factory).assess(self.output_dir, self.plan.pages, iteration=3)
        self.assertEqual(report.iteration, 3)
        self.assertTrue(factory.browsers[0].opened[0].startswith("http://"))

    async def test_broken_navigation(self):
        os.remove(os.path.join(self.output_dir, "contact.html"))
        report = await self.gate(BrowserFactory()).assess(self.output_dir, self.plan.pages)
        self.assertFalse(report.meets_thresholds)
        self.assertNotEqual(report.navigation.status, "pass")
        self.assertEqual(report.navigation.issues[0].severity, "critical")

    async def test_browser_released_when_assessment_raises(self):
        factory = BrowserFactory(evaluate_error=RuntimeError("page crashed"))
        with self.assertRaises(QualityAssessmentError) as ctx:
            await self.gate(factory).assess(self.output_dir, self.plan.pages)
        self.assertEqual(ctx.exception.reason, "page crashed")
        self.assertEqual(str(ctx.exception), "QA assessment failed: page crashed")
        self.assertTrue(factory.browsers[0].closed)
        self.assertEqual(factory.browsers[0].pages_closed, 1)

    async def test_browser_released_when_open_fails(self):
        factory = BrowserFactory(open_error=ConnectionError("no chromium"))
        with self.assertRaises(QualityAssessmentError):
            await self.gate(factory).assess(self.output_dir, self.plan.pages)
        self.assertTrue(factory.browsers[0].closed)
        self.assertEqual(factory.browsers[0].pages_closed, 0)

    async def test_navigation_timeout(self):
        factory = BrowserFactory(open_delay=5.0)
        with self.assertRaises(QualityAssessmentError) as ctx:
            await self.gate(factory).assess(self.output_dir, self.plan.pages)
        self.assertIn("timed out", ctx.exception.reason)
        self.assertTrue(factory.browsers[0].closed)

    async def test_cancellation_releases_browser(self):
        factory = BrowserFactory(open_delay=5.0)
        self.config.qa_timeout_ms = 10000
        task = asyncio.create_task(self.gate(factory).assess(self.output_dir, self.plan.pages))
        await asyncio.sleep(0.05)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertTrue(factory.browsers[0].closed)


class TestHTTPServerContext(unittest.TestCase):

    def test_serves_directory_until_exit(self):
        directory = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, directory)
        with open(os.path.join(directory, "about us.html"), "w", encoding="utf-8") as f:
            f.write("<h1>About</h1>")

        client = httpx.Client(trust_env=False, timeout=5)
        self.addCleanup(client.close)

        with HTTPServerContext(directory) as server:
            url = server.url_for("about us.html")
            response = client.get(url)
            self.assertEqual(response.status_code, 200)
            self.assertIn("About", response.text)
            self.assertEqual(client.get(server.url_for("missing.html")).status_code, 404)

        with self.assertRaises(httpx.ConnectError):
            client.get(url)


class TestHTTPServerContextAsync(unittest.IsolatedAsyncioTestCase):

    async def test_shutdown_does_not_block_event_loop(self):
        directory = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, directory)
        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        async with HTTPServerContext(directory) as server:
            shutdown = server.server.shutdown

            def slow_shutdown():
                time.sleep(0.3)
                shutdown()

            server.server.shutdown = slow_shutdown
            task = asyncio.create_task(ticker())
            await asyncio.sleep(0)
            ticks = 0

        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertGreaterEqual(ticks, 5)
        self.assertIsNone(server.server)


if __name__ == '__main__':
    unittest.main()
