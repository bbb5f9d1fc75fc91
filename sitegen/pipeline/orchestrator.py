"""
Pipeline orchestrator.
======================
Sequences the 30 numbered phases, streams progress, collects recoverable
errors and drives the bounded quality-gate iteration loop.
"""
import asyncio
import json
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from ..domain import (
    ProjectConfig, ArchetypeProfile, PagePlan, DesignTokens, GeneratedLayout,
    SynthesizedContent, GenerationProgress, DeploymentConfig, DeploymentResult,
)
from ..interfaces import IContentGenerator, IDeploymentAdapter
from ..generators import (
    ConfigNormalizer, ArchetypeClassifier, PagePlanner, DesignTokenGenerator,
    LayoutSelector, ContentSynthesizer, SiteAssembler,
)
from ..deployment import render_deployment_summary
from .config import PipelineConfig, FileNames, IntermediateFiles, PHASES
from .context import PipelineContext
from .logger import PipelineLogger
from .validators.quality_gate import QualityAssessmentError
from .validators.report import QAReport

ProgressCallback = Callable[[GenerationProgress], None]


@dataclass
class PipelineResult:
    project: ProjectConfig
    output_dir: str
    archetype: ArchetypeProfile
    plan: PagePlan
    tokens: DesignTokens
    layouts: Dict[str, GeneratedLayout]
    content: SynthesizedContent
    qa_report: Optional[QAReport]
    deployment: Optional[DeploymentResult]
    errors: List[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def project_slug(self) -> str:
        return self.project.project_slug

    @property
    def success(self) -> bool:
        return not self.errors

    def to_event(self) -> Dict[str, Any]:
        event = {
            "type": "complete",
            "success": self.success,
            "projectSlug": self.project_slug,
            "duration": self.duration_ms,
            "qaReport": self.qa_report.to_dict() if self.qa_report else None,
        }
        if self.deployment is not None:
            event["deployment"] = self.deployment.to_dict()
        if self.errors:
            event["errors"] = list(self.errors)
        return event


def _failure_reason(error: Exception) -> str:
    if isinstance(error, QualityAssessmentError):
        return error.reason
    return str(error) or type(error).__name__


class PipelineOrchestrator:
    """
    Owns the end-to-end generation run.

    Classification, planning and synthesis failures propagate to the
    caller. Quality assessment and deployment failures are recorded in the
    result's error list and the run still completes.
    """

    def __init__(self, generator: IContentGenerator, quality_gate,
                 deployer: Optional[IDeploymentAdapter] = None,
                 config: Optional[PipelineConfig] = None,
                 logger: Optional[PipelineLogger] = None):
        self.config = config or PipelineConfig()
        self.logger = logger or PipelineLogger("pipeline", verbose=self.config.verbose)
        self.generator = generator
        self.quality_gate = quality_gate
        self.deployer = deployer

        self.normalizer = ConfigNormalizer()
        self.classifier = ArchetypeClassifier(generator)
        self.planner = PagePlanner()
        self.token_generator = DesignTokenGenerator()
        self.layout_selector = LayoutSelector(generator)
        self.synthesizer = ContentSynthesizer(generator, base_url=self.config.base_url)
        self.assembler = SiteAssembler(base_url=self.config.base_url)

    async def _run_throttled(self, ctx: PipelineContext, func, *args, **kwargs):
        async with ctx.semaphore:
            return await asyncio.to_thread(func, *args, **kwargs)

    def _emit(self, ctx: PipelineContext, phase: int, step: Optional[str] = None, message: Optional[str] = None):
        number, name, default_step, percent, default_message = PHASES[phase - 1]
        if step is None:
            self.logger.phase(number, name)
        if ctx.on_progress is None:
            return
        ctx.on_progress(GenerationProgress(
            phase=number,
            phase_name=name,
            current_step=step or default_step,
            progress=percent,
            message=message or default_message,
        ))

    async def _each(self, ctx: PipelineContext, phase: int, items: List,
                    func: Callable, describe: Callable[[Any], str]) -> List:
        """Run func over items with bounded parallelism, emitting one sub-event per finished item."""
        async def one(item):
            result = await self._run_throttled(ctx, func, item)
            self._emit(ctx, phase, step=describe(item))
            return result
        return list(await asyncio.gather(*(one(item) for item in items)))

    async def run(self, intake: Union[Dict[str, Any], ProjectConfig],
                  on_progress: Optional[ProgressCallback] = None,
                  deployment: Optional[DeploymentConfig] = None) -> PipelineResult:
        try:
            return await self._run(intake, on_progress, deployment)
        except Exception as e:
            self.logger.error(f"Generation failed: {_failure_reason(e)}")
            raise

    async def _run(self, intake, on_progress: Optional[ProgressCallback],
                   deployment: Optional[DeploymentConfig]) -> PipelineResult:
        # PHASE 1-2: intake and profile; invalid intake aborts before any event
        project = intake if isinstance(intake, ProjectConfig) else self.normalizer.normalize(intake)
        ctx = PipelineContext(
            project=project,
            output_dir=self.config.output_dir_for(project.project_slug),
            on_progress=on_progress,
            semaphore=asyncio.Semaphore(self.config.max_concurrency),
        )
        self._emit(ctx, 1)
        self._save_intermediate(ctx, IntermediateFiles.PROJECT, project)
        self._emit(ctx, 2)

        # PHASE 3-5: classification; keywords come with the archetype profile
        self._emit(ctx, 3)
        ctx.archetype = await self._run_throttled(ctx, self.classifier.classify, project)
        self.logger.success(f"Archetype: {ctx.archetype.archetype} ({ctx.archetype.confidence:.2f})")
        self._save_intermediate(ctx, IntermediateFiles.ARCHETYPE, ctx.archetype)
        self._emit(ctx, 4)
        self._emit(ctx, 5)

        # PHASE 6-9: page plan, sections, SEO descriptors
        self._emit(ctx, 6)
        self._emit(ctx, 7)
        ctx.plan = await self._run_throttled(ctx, self.planner.plan, project, ctx.archetype)
        self.logger.success(f"Planned {len(ctx.plan.pages)} pages: {', '.join(p.id for p in ctx.plan.pages)}")
        self._save_intermediate(ctx, IntermediateFiles.PAGE_PLAN, [p.to_dict() for p in ctx.plan.pages])
        self._emit(ctx, 8)
        self._emit(ctx, 9)

        # PHASE 10-13: design tokens (typography, palette and components included)
        self._emit(ctx, 10)
        ctx.tokens = await self._run_throttled(ctx, self.token_generator.generate, project, ctx.archetype)
        self._save_intermediate(ctx, IntermediateFiles.DESIGN_TOKENS, ctx.tokens)
        self._emit(ctx, 11)
        self._emit(ctx, 12)
        self._emit(ctx, 13)

        # PHASE 14-16: blueprint, variant per page, responsive projection
        self._emit(ctx, 14)
        self._emit(ctx, 15)
        layouts = await self._each(
            ctx, 15, ctx.plan.pages,
            lambda page: self.layout_selector.select(page, project, ctx.archetype),
            lambda page: f"Layout for {page.title}",
        )
        ctx.layouts = {layout.page_id: layout for layout in layouts}
        self._save_intermediate(ctx, IntermediateFiles.LAYOUTS, {
            page_id: layout.selected_variant.section_order for page_id, layout in ctx.layouts.items()
        })
        self._emit(ctx, 16)

        # PHASE 17-18: imagery
        self._emit(ctx, 17)
        plans = self.synthesizer.plan_images(ctx.layouts, project, ctx.archetype, ctx.tokens)
        self._emit(ctx, 18)
        ctx.content.images = await self._each(
            ctx, 18, plans, self.synthesizer.generate_image, lambda plan: f"Image {plan.id}",
        )

        # PHASE 19: copy per page section
        self._emit(ctx, 19)
        section_items = [
            (page, section)
            for page in ctx.plan.pages
            for section in ctx.layouts[page.id].sections
        ]
        copies = await self._each(
            ctx, 19, section_items,
            lambda item: self.synthesizer.write_copy(item[0], item[1], project, ctx.archetype),
            lambda item: f"Copy for {item[0].title} / {item[1].id}",
        )
        for (page, section), copy in zip(section_items, copies):
            ctx.content.copies[SynthesizedContent.key(page.id, section.id)] = copy

        # PHASE 20-21: SEO metadata; links were planned with the pages
        self._emit(ctx, 20)
        seo = await self._each(
            ctx, 20, ctx.plan.pages,
            lambda page: self.synthesizer.page_seo(page, project, ctx.archetype),
            lambda page: f"SEO for {page.title}",
        )
        ctx.content.seo = {page.id: data for page, data in zip(ctx.plan.pages, seo)}
        self._emit(ctx, 21)

        # PHASE 22-25: render and write the site
        self._emit(ctx, 22)
        written = await asyncio.to_thread(
            self.assembler.assemble, project, ctx.plan, ctx.tokens, ctx.layouts, ctx.content, ctx.output_dir,
        )
        self.logger.save(f"{len(written)} files in {ctx.output_dir}")
        self._emit(ctx, 23)
        missing = self.assembler.missing_pages(ctx.plan, ctx.output_dir)
        if missing:
            self.logger.warning(f"Pages missing after assembly: {', '.join(missing)}")
        self._emit(ctx, 24)
        self._emit(ctx, 25)

        # PHASE 26: quality gate
        self._emit(ctx, 26)
        try:
            ctx.qa_report = await self.quality_gate.assess(ctx.output_dir, ctx.plan.pages, 1)
        except Exception as e:
            self.logger.error(f"QA assessment failed: {_failure_reason(e)}")
            ctx.errors.append(f"QA assessment failed: {_failure_reason(e)}")

        # PHASE 27: bounded iteration
        self._emit(ctx, 27)
        await self._iterate(ctx)
        if ctx.qa_report is not None and ctx.qa_report.navigation.status == "fail":
            nav = ctx.qa_report.navigation
            ctx.errors.append(
                f"[CRITICAL] Navigation integrity check failed: {nav.broken_links} of "
                f"{nav.total_links} links are broken"
            )

        # PHASE 28: sitemap and robots
        self._emit(ctx, 28)
        await asyncio.to_thread(self.assembler.write_seo_files, ctx.plan.pages, ctx.output_dir)

        # PHASE 29: optional deployment
        self._emit(ctx, 29)
        if deployment is not None:
            await self._deploy(ctx, deployment)

        # PHASE 30: report
        self._emit(ctx, 30)
        if ctx.qa_report is not None:
            path = os.path.join(ctx.project_dir, FileNames.QA_REPORT)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(ctx.qa_report.to_dict(), f, indent=2)
            self.logger.save(path)

        result = PipelineResult(
            project=project,
            output_dir=ctx.output_dir,
            archetype=ctx.archetype,
            plan=ctx.plan,
            tokens=ctx.tokens,
            layouts=ctx.layouts,
            content=ctx.content,
            qa_report=ctx.qa_report,
            deployment=ctx.deployment,
            errors=list(ctx.errors),
            duration_ms=ctx.elapsed_ms,
        )
        if result.success:
            self.logger.success(f"Generation complete in {result.duration_ms}ms")
        else:
            self.logger.warning(f"Generation complete with {len(result.errors)} error(s)")
        return result

    async def _iterate(self, ctx: PipelineContext):
        iteration = 1
        max_iterations = self.config.max_iterations
        while ctx.qa_report is not None and not ctx.qa_report.meets_thresholds and iteration < max_iterations:
            iteration += 1
            self._emit(ctx, 27, step=f"Iteration {iteration}", message=f"Improving ({iteration}/{max_iterations})...")
            try:
                missing = self.assembler.missing_pages(ctx.plan, ctx.output_dir)
                if missing:
                    self.logger.step(f"Re-rendering missing pages: {', '.join(missing)}")
                    await asyncio.to_thread(
                        self.assembler.assemble, ctx.project, ctx.plan, ctx.tokens, ctx.layouts,
                        ctx.content, ctx.output_dir, missing,
                    )
                ctx.qa_report = await self.quality_gate.assess(ctx.output_dir, ctx.plan.pages, iteration)
            except Exception as e:
                self.logger.error(f"QA iteration {iteration} failed: {_failure_reason(e)}")
                ctx.errors.append(f"QA iteration {iteration} failed: {_failure_reason(e)}")
                break

    async def _deploy(self, ctx: PipelineContext, deployment: DeploymentConfig):
        if self.deployer is None:
            ctx.errors.append("Deployment failed: no deployment adapter configured")
            return
        try:
            result = await self.deployer.deploy(ctx.output_dir, deployment)
            summary = render_deployment_summary(result, ctx.project)
            ctx.save_file(FileNames.DEPLOYMENT_SUMMARY, summary)
            self.logger.save(FileNames.DEPLOYMENT_SUMMARY)
        except Exception as e:
            self.logger.error(f"Deployment failed: {e}")
            ctx.errors.append(f"Deployment failed: {e}")
            return
        ctx.deployment = result
        if not result.success:
            ctx.errors.append(f"Deployment failed: {result.message}")

    def _save_intermediate(self, ctx: PipelineContext, filename: str, data):
        if self.config.save_intermediates:
            ctx.save_intermediate(filename, data)
            self.logger.save(filename)
