"""Browser driver backed by Playwright's async API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import ElementHandle, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from .base import BrowserDriver, DriverError, LaunchError

BROWSER_ARGS = ["--disable-gpu"]


@asynccontextmanager
async def _driver_errors(action: str, detail: str) -> AsyncIterator[None]:
    """Re-raise Playwright failures (timeouts included) as DriverError."""
    try:
        yield
    except PlaywrightError as e:
        raise DriverError(f"{action} {detail!r} failed: {e}") from e


class PlaywrightDriver(BrowserDriver):
    """BrowserDriver over a single Playwright page."""

    def __init__(self, page: Page):
        self.page = page

    @classmethod
    @asynccontextmanager
    async def launch(
        cls,
        headless: bool = True,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None
    ) -> AsyncIterator["PlaywrightDriver"]:
        """
        Start a dedicated Chromium instance and yield a driver for a fresh page.

        The browser is closed when the context exits, whatever the exit path.

        Args:
            headless: Run Chromium without a window
            timeout: Default per-operation timeout in seconds
            logger: Optional logger for teardown problems

        Yields:
            PlaywrightDriver: Driver bound to a new page

        Raises:
            LaunchError: If Playwright or the browser cannot be started
        """
        logger = logger or logging.getLogger(__name__)

        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise LaunchError(f"Failed to start Playwright: {e}") from e

        browser = None
        try:
            try:
                browser = await playwright.chromium.launch(headless=headless, args=BROWSER_ARGS)
                context = await browser.new_context()
                if timeout is not None:
                    context.set_default_timeout(timeout * 1000)
                page = await context.new_page()
            except Exception as e:
                raise LaunchError(f"Browser warmup failed: {e}") from e

            yield cls(page)

        finally:
            if browser is not None:
                try:
                    await browser.close()
                except PlaywrightError as e:
                    logger.warning(
                        f"Error closing browser: {e}",
                        extra={"subsystem": "driver", "part": "teardown"}
                    )
            try:
                await playwright.stop()
            except PlaywrightError as e:
                logger.warning(
                    f"Error stopping Playwright: {e}",
                    extra={"subsystem": "driver", "part": "teardown"}
                )

    async def navigate(self, url: str) -> None:
        async with _driver_errors("navigate", url):
            await self.page.goto(url)

    async def wait_visible(self, locator: str) -> None:
        async with _driver_errors("wait visible", locator):
            await self.page.locator(locator).first.wait_for(state="visible")

    async def click(self, locator: str) -> None:
        async with _driver_errors("click", locator):
            await self.page.locator(locator).first.click()

    async def send_keys(self, locator: str, text: str) -> None:
        async with _driver_errors("send keys", locator):
            await self.page.locator(locator).first.press_sequentially(text)

    async def read_text(self, locator: str) -> str:
        async with _driver_errors("read text", locator):
            return await self.page.locator(locator).first.inner_text()

    async def query_node(self, locator: str) -> ElementHandle:
        async with _driver_errors("query", locator):
            node = await self.page.wait_for_selector(locator, state="visible")
        if node is None:
            raise DriverError(f"selector {locator!r} did not return any nodes")
        return node

    async def dispatch_keystrokes(self, node: ElementHandle, text: str) -> None:
        async with _driver_errors("type into", "node"):
            await node.type(text)
