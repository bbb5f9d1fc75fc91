import json
import os
import shutil
import tempfile
import unittest
import zipfile
from unittest.mock import patch

import httpx

from sitegen.deployment import (
    ProviderDeploymentAdapter, DeploymentError, summarize_output, render_deployment_summary,
)
from sitegen.domain import DeploymentConfig, ProjectConfig


class TestDeploymentAdapter(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.project_dir = tempfile.mkdtemp()
        self.output_dir = os.path.join(self.project_dir, "generated")
        os.makedirs(os.path.join(self.output_dir, "images"))
        for name, text in (("index.html", "<html>home</html>"), ("about.html", "<html>about</html>"),
                           ("styles.css", "body {}"), ("images/hero.svg", "<svg/>")):
            with open(os.path.join(self.output_dir, name), "w", encoding="utf-8") as f:
                f.write(text)

    def tearDown(self):
        shutil.rmtree(self.project_dir)

    def test_summarize_output(self):
        summary = summarize_output(self.output_dir, "zip")
        self.assertEqual(summary.files, 4)
        self.assertEqual(summary.pages, ["about.html", "index.html"])
        self.assertGreater(summary.size, 0)

    async def test_zip(self):
        result = await ProviderDeploymentAdapter().deploy(self.output_dir, DeploymentConfig(provider="zip"))
        self.assertTrue(result.success)
        self.assertEqual(os.path.dirname(result.zip_path), self.project_dir)
        with zipfile.ZipFile(result.zip_path) as archive:
            self.assertIn("index.html", archive.namelist())
        self.assertEqual(result.to_dict()["zipPath"], result.zip_path)

    async def test_unknown_provider(self):
        with self.assertRaises(DeploymentError):
            await ProviderDeploymentAdapter().deploy(self.output_dir, DeploymentConfig(provider="ftp"))

    async def test_missing_output_dir(self):
        with self.assertRaises(DeploymentError):
            await ProviderDeploymentAdapter().deploy(os.path.join(self.project_dir, "nope"),
                                                     DeploymentConfig(provider="zip"))

    async def test_missing_token(self):
        with patch.dict(os.environ, {}, clear=True):
            result = await ProviderDeploymentAdapter().deploy(self.output_dir, DeploymentConfig(provider="netlify"))
        self.assertFalse(result.success)
        self.assertIn("NETLIFY_API_TOKEN", result.message)

    async def test_netlify_upload(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"deploy_ssl_url": "https://harbor.netlify.app"})

        adapter = ProviderDeploymentAdapter(transport=httpx.MockTransport(handler))
        result = await adapter.deploy(self.output_dir,
                                      DeploymentConfig(provider="netlify", api_key="tok", site_name="harbor"))

        self.assertTrue(result.success)
        self.assertEqual(result.url, "https://harbor.netlify.app")
        self.assertEqual(requests[0].url.path, "/api/v1/sites/harbor/deploys")
        self.assertEqual(requests[0].headers["Authorization"], "Bearer tok")
        self.assertEqual(requests[0].headers["Content-Type"], "application/zip")

    async def test_vercel_upload(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"url": "harbor.vercel.app"})

        adapter = ProviderDeploymentAdapter(transport=httpx.MockTransport(handler))
        result = await adapter.deploy(self.output_dir, DeploymentConfig(provider="vercel", api_key="tok"))

        self.assertTrue(result.success)
        self.assertEqual(result.url, "https://harbor.vercel.app")
        files = {f["file"] for f in bodies[0]["files"]}
        self.assertEqual(files, {"index.html", "about.html", "styles.css", "images/hero.svg"})

    async def test_provider_error_is_not_raised(self):
        adapter = ProviderDeploymentAdapter(
            transport=httpx.MockTransport(lambda request: httpx.Response(401, json={"message": "bad token"})))
        result = await adapter.deploy(self.output_dir, DeploymentConfig(provider="vercel", api_key="tok"))
        self.assertFalse(result.success)
        self.assertIn("Vercel deployment failed", result.message)

    async def test_summary_markdown(self):
        result = await ProviderDeploymentAdapter().deploy(self.output_dir, DeploymentConfig(provider="zip"))
        project = ProjectConfig(project_name="Harbor Law", project_slug="harbor-law", industry="Legal")
        text = render_deployment_summary(result, project)
        self.assertIn("**Project**: Harbor Law", text)
        self.assertIn("**Provider**: zip", text)
        self.assertIn("✅ Success", text)


if __name__ == '__main__':
    unittest.main()
