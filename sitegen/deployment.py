"""
Deployment adapters.
====================
Publishes an assembled output directory as a zip archive or to Netlify /
Vercel over their HTTP APIs.
"""
import asyncio
import base64
import hashlib
import os
import shutil
import tempfile
from datetime import datetime, timezone
from typing import Dict, List, Optional

import httpx

from .domain import DeploymentConfig, DeploymentResult, DeploymentSummary, ProjectConfig
from .interfaces import IDeploymentAdapter
from .pipeline.logger import PipelineLogger

NETLIFY_API = "https://api.netlify.com/api/v1"
VERCEL_API = "https://api.vercel.com"
PROVIDERS = ("zip", "netlify", "vercel")


class DeploymentError(RuntimeError):
    """Unknown provider or unusable output directory."""


def summarize_output(output_dir: str, provider: str, size: Optional[int] = None) -> DeploymentSummary:
    files = 0
    total = 0
    pages = []
    for root, _, names in os.walk(output_dir):
        for name in names:
            files += 1
            total += os.path.getsize(os.path.join(root, name))
            if name.endswith(".html") and root == output_dir:
                pages.append(name)
    return DeploymentSummary(
        provider=provider,
        deployed_at=datetime.now(timezone.utc).isoformat(),
        files=files,
        size=total if size is None else size,
        pages=sorted(pages),
    )


def render_deployment_summary(result: DeploymentResult, project: ProjectConfig) -> str:
    lines = [
        "# Deployment Summary",
        "",
        f"**Project**: {project.project_name}",
        f"**Provider**: {result.summary.provider}",
        f"**Deployed At**: {result.summary.deployed_at}",
        f"**Status**: {'✅ Success' if result.success else '❌ Failed'}",
        "",
        "## Details",
        "",
        f"- **Files**: {result.summary.files}",
        f"- **Size**: {result.summary.size / 1024 / 1024:.2f} MB",
        f"- **Pages**: {', '.join(result.summary.pages)}",
        "",
    ]
    if result.url:
        lines.append(f"**URL**: {result.url}")
    if result.zip_path:
        lines.append(f"**ZIP**: {result.zip_path}")
    lines += ["", "## Message", "", result.message, ""]
    return "\n".join(lines)


class ProviderDeploymentAdapter(IDeploymentAdapter):
    """Dispatches to a provider by name. Provider failures come back as success=False."""

    def __init__(self, logger: Optional[PipelineLogger] = None, timeout: float = 120.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.logger = logger or PipelineLogger("pipeline.deploy")
        self.timeout = timeout
        self.transport = transport

    async def deploy(self, output_dir: str, config: DeploymentConfig) -> DeploymentResult:
        if config.provider not in PROVIDERS:
            raise DeploymentError(f"Unknown provider: {config.provider}")
        if not os.path.isdir(output_dir):
            raise DeploymentError(f"Output directory {output_dir} does not exist")

        self.logger.step(f"Deploying {output_dir} via {config.provider}")
        if config.provider == "zip":
            return await self._deploy_zip(output_dir)
        if config.provider == "netlify":
            return await self._deploy_netlify(output_dir, config)
        return await self._deploy_vercel(output_dir, config)

    def _client(self, token: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {token}"},
            transport=self.transport,
        )

    def _failure(self, output_dir: str, provider: str, message: str) -> DeploymentResult:
        self.logger.warning(message)
        return DeploymentResult(success=False, message=message, summary=summarize_output(output_dir, provider))

    # -------------------------------------------------------------------------
    # Zip
    # -------------------------------------------------------------------------

    async def _deploy_zip(self, output_dir: str) -> DeploymentResult:
        project_dir = os.path.dirname(os.path.abspath(output_dir))
        slug = os.path.basename(project_dir)
        base_name = os.path.join(project_dir, f"{slug}-website")
        zip_path = await asyncio.to_thread(shutil.make_archive, base_name, "zip", output_dir)
        self.logger.save(zip_path)
        return DeploymentResult(
            success=True,
            message=f"ZIP file created: {zip_path}",
            summary=summarize_output(output_dir, "zip", size=os.path.getsize(zip_path)),
            zip_path=zip_path,
        )

    # -------------------------------------------------------------------------
    # Netlify
    # -------------------------------------------------------------------------

    async def _deploy_netlify(self, output_dir: str, config: DeploymentConfig) -> DeploymentResult:
        token = config.api_key or os.environ.get("NETLIFY_API_TOKEN")
        if not token:
            return self._failure(output_dir, "netlify",
                                 "Netlify API token required. Set NETLIFY_API_TOKEN environment "
                                 "variable or provide apiKey in config.")

        with tempfile.TemporaryDirectory() as tmp:
            archive = await asyncio.to_thread(shutil.make_archive, os.path.join(tmp, "site"), "zip", output_dir)
            with open(archive, "rb") as f:
                payload = f.read()

        try:
            async with self._client(token) as client:
                if config.site_name:
                    url = f"{NETLIFY_API}/sites/{config.site_name}/deploys"
                else:
                    url = f"{NETLIFY_API}/sites"
                response = await client.post(url, content=payload, headers={"Content-Type": "application/zip"})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            return self._failure(output_dir, "netlify", f"Netlify deployment failed: {e}")

        deploy_url = data.get("deploy_ssl_url") or data.get("deploy_url") or data.get("ssl_url") or data.get("url")
        return DeploymentResult(
            success=True,
            message="Successfully deployed to Netlify" + (f" at {deploy_url}" if deploy_url else ""),
            summary=summarize_output(output_dir, "netlify"),
            url=deploy_url,
        )

    # -------------------------------------------------------------------------
    # Vercel
    # -------------------------------------------------------------------------

    async def _deploy_vercel(self, output_dir: str, config: DeploymentConfig) -> DeploymentResult:
        token = config.api_key or os.environ.get("VERCEL_API_TOKEN")
        if not token:
            return self._failure(output_dir, "vercel",
                                 "Vercel API token required. Set VERCEL_API_TOKEN environment "
                                 "variable or provide apiKey in config.")

        files = await asyncio.to_thread(self._vercel_files, output_dir)
        body = {
            "name": config.site_name or os.path.basename(os.path.dirname(os.path.abspath(output_dir))),
            "files": files,
            "projectSettings": {"framework": None},
            "target": "production",
        }
        try:
            async with self._client(token) as client:
                response = await client.post(f"{VERCEL_API}/v13/deployments", json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            return self._failure(output_dir, "vercel", f"Vercel deployment failed: {e}")

        url = data.get("url")
        if url and not url.startswith("http"):
            url = f"https://{url}"
        return DeploymentResult(
            success=True,
            message="Successfully deployed to Vercel" + (f" at {url}" if url else ""),
            summary=summarize_output(output_dir, "vercel"),
            url=url,
        )

    @staticmethod
    def _vercel_files(output_dir: str) -> List[Dict[str, str]]:
        files = []
        for root, _, names in os.walk(output_dir):
            for name in sorted(names):
                path = os.path.join(root, name)
                with open(path, "rb") as f:
                    data = f.read()
                files.append({
                    "file": os.path.relpath(path, output_dir).replace(os.sep, "/"),
                    "data": base64.b64encode(data).decode("ascii"),
                    "encoding": "base64",
                    "sha": hashlib.sha1(data).hexdigest(),
                })
        return files
