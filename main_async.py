import argparse
import asyncio
import dataclasses
import json
import sys

from sitegen.generators import build_content_generator
from sitegen.llm import collaborators_from_env
from sitegen.repository import InMemoryRepository
from sitegen.deployment import ProviderDeploymentAdapter, PROVIDERS
from sitegen.pipeline import PipelineConfig, PipelineLogger
from sitegen.pipeline.orchestrator import PipelineOrchestrator
from sitegen.pipeline.stream import GenerationStream, status_descriptor
from sitegen.pipeline.validators import QualityGate
from sitegen.pipeline.validators.browser import PlaywrightBrowser


def build_stream(config: PipelineConfig, repository: InMemoryRepository) -> GenerationStream:
    logger = PipelineLogger("pipeline", verbose=config.verbose)
    text, image = collaborators_from_env()
    generator = build_content_generator(text, image, repository)
    if generator.collaborator_backed:
        logger.info("Using OpenAI-compatible collaborators")
    else:
        logger.info("OPENAI_API_KEY not set, using deterministic content")

    quality_gate = QualityGate(
        browser_factory=lambda: PlaywrightBrowser(headless=config.headless),
        config=config,
        logger=logger.child("quality"),
    )
    orchestrator = PipelineOrchestrator(
        generator,
        quality_gate,
        deployer=ProviderDeploymentAdapter(logger=logger.child("deploy")),
        config=config,
        logger=logger,
    )
    return GenerationStream(orchestrator, repository, logger=logger.child("stream"))


async def main(args) -> int:
    if args.status:
        print(json.dumps(status_descriptor()))
        return 0
    if not args.intake:
        print("❌ An intake JSON file is required (or --status)", file=sys.stderr)
        return 2

    with open(args.intake, "r", encoding="utf-8") as f:
        intake = json.load(f)

    overrides = {"verbose": not args.quiet}
    if args.output_root:
        overrides["output_root"] = args.output_root
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.no_serve:
        overrides["serve_output"] = False
    if args.headed:
        overrides["headless"] = False
    if args.save_intermediates:
        overrides["save_intermediates"] = True
    config = dataclasses.replace(PipelineConfig.from_env(), **overrides)

    deployment = None
    if args.deploy:
        deployment = {"provider": args.deploy, "apiKey": args.api_key, "siteName": args.site_name}

    print(f"🚀 Starting generation for '{intake.get('businessName', '?')}'", file=sys.stderr)
    stream = build_stream(config, InMemoryRepository())

    exit_code = 1
    async for event in stream.events(intake, deployment):
        print(json.dumps(event), flush=True)
        if event["type"] == "complete":
            exit_code = 0 if event["success"] else 1
            print(f"📂 Output directory: {config.output_dir_for(event['projectSlug'])}", file=sys.stderr)
    return exit_code


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a multi-page website from a business intake form")
    parser.add_argument("intake", nargs="?", help="Path to the intake JSON file")
    parser.add_argument("--status", action="store_true", help="Print the capability descriptor and exit")
    parser.add_argument("--output-root", type=str, default=None, help="Root directory for generated projects")
    parser.add_argument("--base-url", type=str, default=None, help="Public base URL used for canonical links")
    parser.add_argument("--deploy", choices=PROVIDERS, default=None, help="Publish target after QA")
    parser.add_argument("--api-key", type=str, default=None, help="Provider API token")
    parser.add_argument("--site-name", type=str, default=None, help="Provider site/project name")
    parser.add_argument("--no-serve", action="store_true", help="Assess via file:// instead of a local HTTP server")
    parser.add_argument("--headed", action="store_true", help="Run the QA browser with a visible window")
    parser.add_argument("--save-intermediates", action="store_true", help="Write per-phase JSON snapshots")
    parser.add_argument("--quiet", action="store_true", help="Only emit the event stream")
    return parser.parse_args(argv)


def cli():
    sys.exit(asyncio.run(main(parse_args())))


if __name__ == "__main__":
    cli()
