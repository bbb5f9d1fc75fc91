"""
Orchestrator tests: phase sequencing, error isolation and the bounded
quality iteration loop. The quality gate is mocked except where noted.
"""
import asyncio
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import AsyncMock, MagicMock

from sitegen.domain import DeploymentConfig, DeploymentResult, DeploymentSummary
from sitegen.generators import DeterministicGenerator
from sitegen.pipeline import PipelineConfig
from sitegen.pipeline.orchestrator import PipelineOrchestrator
from sitegen.pipeline.validators import (
    QualityGate, QualityAssessmentError, StaticMetricsProvider, NavigationMetrics, build_report,
)
from sitegen.deployment import ProviderDeploymentAdapter

from tests.fakes import BrowserFactory

INTAKE = {
    "businessName": "Harbor Law",
    "industry": "Legal Services",
    "services": ["Estate Planning", "Probate"],
    "location": {"city": "Portland", "region": "OR"},
}

PERFECT = ({"score": 100}, {"score": 100, "wcag": {"level": "AA"}, "issues": {}}, {"score": 100}, {"score": 10.0})


def make_report(status="pass", score=10, broken=0, iteration=1):
    nav = NavigationMetrics(integrity_score=score, status=status, total_links=10,
                            working_links=10 - broken, broken_links=broken)
    return build_report(*PERFECT, nav, iteration)


def mock_gate(*results):
    gate = MagicMock()
    if len(results) == 1 and not isinstance(results[0], BaseException):
        gate.assess = AsyncMock(return_value=results[0])
    else:
        gate.assess = AsyncMock(side_effect=list(results))
    return gate


class TestPipelineOrchestrator(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.output_root = tempfile.mkdtemp()
        self.config = PipelineConfig(output_root=self.output_root, serve_output=False, verbose=False)
        self.events = []

    def tearDown(self):
        shutil.rmtree(self.output_root)

    def orchestrator(self, gate, generator=None, deployer=None):
        return PipelineOrchestrator(generator or DeterministicGenerator(), gate,
                                    deployer=deployer, config=self.config)

    async def run_pipeline(self, gate, **kwargs):
        deployment = kwargs.pop("deployment", None)
        return await self.orchestrator(gate, **kwargs).run(INTAKE, self.events.append, deployment)

    async def test_successful_run(self):
        result = await self.run_pipeline(mock_gate(make_report()))

        self.assertTrue(result.success)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.project_slug, "harbor-law")
        self.assertEqual(result.archetype.archetype, "legal")
        self.assertEqual(set(result.layouts), {p.id for p in result.plan.pages})
        for page in result.plan.pages:
            self.assertIn(page.id, result.content.seo)
            self.assertTrue(os.path.isfile(os.path.join(result.output_dir, page.filename)))
        self.assertTrue(os.path.isfile(os.path.join(result.output_dir, "sitemap.xml")))
        self.assertTrue(os.path.isfile(os.path.join(result.output_dir, "robots.txt")))

        report_path = os.path.join(os.path.dirname(result.output_dir), "qa-report.json")
        with open(report_path, encoding="utf-8") as f:
            self.assertTrue(json.load(f)["meetsThresholds"])

    async def test_progress_covers_all_phases_in_order(self):
        await self.run_pipeline(mock_gate(make_report()))

        phases = [e.phase for e in self.events]
        self.assertEqual(phases, sorted(phases))
        self.assertEqual(sorted(set(phases)), list(range(1, 31)))
        self.assertEqual(self.events[-1].progress, 100)
        self.assertTrue(all(0 <= e.progress <= 100 for e in self.events))
        layout_steps = [e.current_step for e in self.events if e.phase == 15]
        self.assertIn("Layout for Contact", layout_steps)

    async def test_concurrent_runs_keep_their_own_progress(self):
        orchestrator = self.orchestrator(mock_gate(make_report()))
        harbor, summit = [], []
        other = dict(INTAKE, businessName="Summit Dental", industry="Dental Clinic")

        first, second = await asyncio.gather(
            orchestrator.run(INTAKE, harbor.append),
            orchestrator.run(other, summit.append),
        )

        self.assertEqual((first.project_slug, second.project_slug), ("harbor-law", "summit-dental"))
        for events, result in ((harbor, first), (summit, second)):
            self.assertEqual(sorted({e.phase for e in events}), list(range(1, 31)))
            self.assertEqual([e.phase for e in events].count(1), 1)
            seo_steps = [e.current_step for e in events if e.phase == 20]
            self.assertEqual(len(seo_steps), len(result.plan.pages))

    async def test_iteration_cap(self):
        gate = mock_gate(make_report("warning", score=9, broken=1))
        result = await self.run_pipeline(gate)

        self.assertEqual(gate.assess.await_count, 5)
        self.assertEqual([c.args[2] for c in gate.assess.await_args_list], [1, 2, 3, 4, 5])
        iterations = [e for e in self.events if e.current_step.startswith("Iteration")]
        self.assertEqual([e.message for e in iterations],
                         ["Improving (2/5)...", "Improving (3/5)...", "Improving (4/5)...", "Improving (5/5)..."])
        self.assertTrue(result.success)
        self.assertFalse(result.qa_report.meets_thresholds)

    async def test_stops_iterating_once_gate_passes(self):
        gate = mock_gate(make_report("warning", score=9, broken=1), make_report())
        result = await self.run_pipeline(gate)
        self.assertEqual(gate.assess.await_count, 2)
        self.assertTrue(result.qa_report.meets_thresholds)

    async def test_quality_assessment_error_is_recorded(self):
        gate = mock_gate(QualityAssessmentError("browser crashed"))
        result = await self.run_pipeline(gate)

        self.assertFalse(result.success)
        self.assertEqual(result.errors, ["QA assessment failed: browser crashed"])
        self.assertIsNone(result.qa_report)
        self.assertEqual(gate.assess.await_count, 1)
        self.assertEqual(self.events[-1].phase, 30)

    async def test_iteration_error_stops_loop(self):
        gate = mock_gate(make_report("warning", score=9, broken=1), RuntimeError("lost connection"))
        result = await self.run_pipeline(gate)

        self.assertEqual(gate.assess.await_count, 2)
        self.assertEqual(result.errors, ["QA iteration 2 failed: lost connection"])
        self.assertEqual(result.qa_report.iteration, 1)

    async def test_navigation_failure_is_escalated(self):
        result = await self.run_pipeline(mock_gate(make_report("fail", score=5, broken=5)))
        self.assertFalse(result.success)
        self.assertEqual(result.errors[-1],
                         "[CRITICAL] Navigation integrity check failed: 5 of 10 links are broken")

    async def test_classification_error_propagates(self):
        generator = MagicMock()
        generator.produce.side_effect = RuntimeError("classifier exploded")
        gate = mock_gate(make_report())
        with self.assertRaises(RuntimeError):
            await self.run_pipeline(gate, generator=generator)
        gate.assess.assert_not_called()
        self.assertLess(max(e.phase for e in self.events), 6)

    async def test_missing_pages_are_rerendered(self):
        calls = []

        async def assess(output_dir, pages, iteration):
            calls.append(iteration)
            if iteration == 1:
                os.remove(os.path.join(output_dir, "terms.html"))
                return make_report("fail", score=0, broken=1)
            self.assertTrue(os.path.isfile(os.path.join(output_dir, "terms.html")))
            return make_report()

        gate = MagicMock()
        gate.assess = assess
        result = await self.run_pipeline(gate)
        self.assertEqual(calls, [1, 2])
        self.assertTrue(result.success)

    async def test_zip_deployment(self):
        result = await self.run_pipeline(
            mock_gate(make_report()),
            deployer=ProviderDeploymentAdapter(),
            deployment=DeploymentConfig(provider="zip"),
        )
        self.assertTrue(result.success)
        self.assertTrue(result.deployment.success)
        self.assertTrue(os.path.isfile(result.deployment.zip_path))
        self.assertTrue(os.path.isfile(os.path.join(result.output_dir, "deployment-summary.md")))
        self.assertIn("deployment", result.to_event())

    async def test_unsuccessful_deployment_is_reported(self):
        deployer = MagicMock()
        deployer.deploy = AsyncMock(return_value=DeploymentResult(
            success=False, message="Netlify API token required",
            summary=DeploymentSummary(provider="netlify", deployed_at="now", files=0, size=0),
        ))
        result = await self.run_pipeline(mock_gate(make_report()), deployer=deployer,
                                         deployment=DeploymentConfig(provider="netlify"))
        self.assertFalse(result.success)
        self.assertEqual(result.errors, ["Deployment failed: Netlify API token required"])
        self.assertFalse(result.deployment.success)

    async def test_deployment_exception_is_recorded(self):
        deployer = MagicMock()
        deployer.deploy = AsyncMock(side_effect=OSError("disk full"))
        result = await self.run_pipeline(mock_gate(make_report()), deployer=deployer,
                                         deployment=DeploymentConfig(provider="zip"))
        self.assertEqual(result.errors, ["Deployment failed: disk full"])
        self.assertIsNone(result.deployment)
        self.assertNotIn("deployment", result.to_event())

    async def test_complete_event(self):
        result = await self.run_pipeline(mock_gate(make_report()))
        event = result.to_event()
        self.assertEqual(event["type"], "complete")
        self.assertTrue(event["success"])
        self.assertEqual(event["projectSlug"], "harbor-law")
        self.assertTrue(event["qaReport"]["meetsThresholds"])
        self.assertNotIn("errors", event)

    async def test_with_fake_browser(self):
        gate = QualityGate(BrowserFactory(), metrics=StaticMetricsProvider(), config=self.config)
        result = await self.run_pipeline(gate)
        self.assertTrue(result.success, result.errors)
        self.assertTrue(result.qa_report.meets_thresholds)
        self.assertEqual(result.qa_report.navigation.integrity_score, 10)

    async def test_intermediates(self):
        self.config.save_intermediates = True
        result = await self.run_pipeline(mock_gate(make_report()))
        intermediates = os.path.join(os.path.dirname(result.output_dir), "intermediates")
        self.assertIn("03_page_plan.json", os.listdir(intermediates))


class TestOrchestratorReuse(unittest.TestCase):

    def setUp(self):
        self.output_root = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.output_root)

    def test_one_instance_across_event_loops(self):
        config = PipelineConfig(output_root=self.output_root, serve_output=False, verbose=False, max_concurrency=1)
        orchestrator = PipelineOrchestrator(DeterministicGenerator(), mock_gate(make_report()), config=config)

        for _ in range(2):
            result = asyncio.run(orchestrator.run(INTAKE))
            self.assertTrue(result.success, result.errors)


if __name__ == '__main__':
    unittest.main()
