"""
Page handle capability and its Playwright implementation.

The engine only talks to the page through the PageHandle protocol: perform an
interaction primitive, run a caller procedure, toggle the sampling flag, and
read back (and clear) the sample buffer. The page's instrumentation is
expected to push render records into ``window.profiler`` while
``window.isProfilingEnabled`` is true.

Browser and page lifecycle (launch, context, preload script, cookies,
navigation, closing) belong to PlaywrightPageProvider, which the runner owns.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from playwright.async_api import async_playwright

from ..models.config import BrowserConfig
from ..models.flows import ActionType, PageProcedure

logger = logging.getLogger(__name__)

SET_SAMPLING_SCRIPT = "(isEnabled) => { window.isProfilingEnabled = isEnabled; }"
READ_SAMPLES_SCRIPT = "() => window.profiler || []"
RESET_SAMPLES_SCRIPT = "() => { window.profiler = []; }"

WAIT_PATTERN = re.compile(r"\s*([+-]?\d+)")


def parse_wait_milliseconds(argument: str) -> int:
    """
    Read the delay of a ``wait`` token.

    Only the leading integer counts, so ``"500.5"`` and ``"500ms"`` both wait
    500 ms. Negative delays wait 0 ms.

    Raises:
        ValueError: If the argument does not start with an integer
    """
    match = WAIT_PATTERN.match(argument)
    if match is None:
        raise ValueError(f"wait expects a number of milliseconds, got '{argument}'")
    return max(int(match.group(1)), 0)


@runtime_checkable
class PageHandle(Protocol):
    """Capabilities the engine needs from a live page."""

    async def execute(self, action: ActionType, argument: str) -> None: ...

    async def run_procedure(self, procedure: PageProcedure) -> None: ...

    async def set_sampling_enabled(self, enabled: bool) -> None: ...

    async def read_and_clear_samples(self) -> List[Dict[str, Any]]: ...

    async def close(self) -> None: ...


class PlaywrightPage:
    """
    PageHandle backed by a Playwright ``Page``.

    Programmatic flows receive the underlying Playwright page, so scenario
    code can use the full Playwright API.
    """

    def __init__(self, page: Any, context: Any = None):
        self.page = page
        self.context = context

    async def execute(self, action: ActionType, argument: str) -> None:
        logger.info(f"{action.value}: {argument}")

        if action is ActionType.CLICK:
            await self.page.click(argument)
        elif action is ActionType.FOCUS:
            await self.page.focus(argument)
        elif action is ActionType.HOVER:
            await self.page.hover(argument)
        elif action is ActionType.GOTO:
            await self.page.goto(argument)
        elif action is ActionType.WAIT:
            await self.page.wait_for_timeout(parse_wait_milliseconds(argument))

    async def run_procedure(self, procedure: PageProcedure) -> None:
        await procedure(self.page)

    async def set_sampling_enabled(self, enabled: bool) -> None:
        await self.page.evaluate(SET_SAMPLING_SCRIPT, enabled)

    async def read_and_clear_samples(self) -> List[Dict[str, Any]]:
        samples = await self.page.evaluate(READ_SAMPLES_SCRIPT)
        await self.page.evaluate(RESET_SAMPLES_SCRIPT)
        return list(samples or [])

    async def goto(self, url: str) -> None:
        await self.page.goto(url)

    @property
    def is_closed(self) -> bool:
        return self.page.is_closed()

    async def close(self) -> None:
        if not self.page.is_closed():
            await self.page.close()
        if self.context is not None:
            await self.context.close()
            self.context = None


class PlaywrightPageProvider:
    """
    Launches Chromium for one repetition and hands out navigated pages.

    Usage:
        async with PlaywrightPageProvider(browser_config) as provider:
            page = await provider.new_page()
    """

    def __init__(self, browser_config: BrowserConfig):
        self.browser_config = browser_config
        self._playwright = None
        self._browser = None
        self._preload_script: Optional[str] = None

    async def __aenter__(self) -> "PlaywrightPageProvider":
        if self.browser_config.preload_file:
            self._preload_script = Path(self.browser_config.preload_file).read_text(encoding="utf-8")

        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.browser_config.headless,
                args=self.browser_config.browser_args or None,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(f"Launched Chromium (headless={self.browser_config.headless})")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def new_page(self) -> PlaywrightPage:
        """
        Open a new page in its own context and navigate it to the target URL.

        Each page gets the preload script, the configured cookies and the
        configured viewport before navigation.
        """
        if self._browser is None:
            raise RuntimeError("Browser not launched. Use the provider as an async context manager.")

        context = await self._browser.new_context(
            viewport={
                "width": self.browser_config.viewport_width,
                "height": self.browser_config.viewport_height,
            },
            device_scale_factor=1,
        )
        if self._preload_script:
            await context.add_init_script(self._preload_script)
        if self.browser_config.cookies:
            await context.add_cookies(self.browser_config.cookies)

        page = PlaywrightPage(await context.new_page(), context=context)
        await page.goto(self.browser_config.url)
        return page
