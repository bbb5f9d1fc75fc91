"""
Playwright browser automation.
==============================
Adapts Playwright's async API to the IBrowserAutomation/IPageHandle ports.
"""
from typing import Any

from playwright.async_api import async_playwright

from ...interfaces import IBrowserAutomation, IPageHandle


class PlaywrightPage(IPageHandle):
    def __init__(self, context, page):
        self._context = context
        self._page = page

    @property
    def raw(self):
        return self._page

    async def evaluate(self, script: str) -> Any:
        return await self._page.evaluate(script)

    async def content(self) -> str:
        return await self._page.content()

    async def close(self):
        await self._context.close()


class PlaywrightBrowser(IBrowserAutomation):
    """
    Lazily launched Chromium.

    Every page gets its own browser context; close() tears down the browser
    and the Playwright driver.
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright = None
        self._browser = None

    async def _ensure_started(self):
        if self._browser is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless)

    async def open(self, url: str, timeout_ms: int) -> IPageHandle:
        await self._ensure_started()
        context = await self._browser.new_context()
        try:
            page = await context.new_page()
            await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except BaseException:
            await context.close()
            raise
        return PlaywrightPage(context, page)

    async def close(self):
        browser, playwright = self._browser, self._playwright
        self._browser = self._playwright = None
        try:
            if browser is not None:
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()
