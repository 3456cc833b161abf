"""
Unit tests for the Playwright page handle and provider.

Playwright objects are replaced by mocks; no browser is launched.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autoprofiler.automation.page import (
    READ_SAMPLES_SCRIPT,
    RESET_SAMPLES_SCRIPT,
    SET_SAMPLING_SCRIPT,
    PageHandle,
    PlaywrightPage,
    PlaywrightPageProvider,
    parse_wait_milliseconds,
)
from autoprofiler.models.config import BrowserConfig
from autoprofiler.models.flows import ActionType


def make_playwright_page():
    page = AsyncMock()
    page.is_closed = MagicMock(return_value=False)
    return page


@pytest.mark.unit
class TestPlaywrightPage:
    """Test cases for PlaywrightPage."""

    def test_implements_page_handle(self):
        assert isinstance(PlaywrightPage(make_playwright_page()), PageHandle)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "action, method",
        [
            (ActionType.CLICK, "click"),
            (ActionType.FOCUS, "focus"),
            (ActionType.HOVER, "hover"),
            (ActionType.GOTO, "goto"),
        ],
    )
    async def test_selector_actions(self, action, method):
        """Test that each primitive maps to the matching Playwright call."""
        page = make_playwright_page()

        await PlaywrightPage(page).execute(action, "#target")

        getattr(page, method).assert_awaited_once_with("#target")

    @pytest.mark.asyncio
    async def test_wait_action(self):
        page = make_playwright_page()

        await PlaywrightPage(page).execute(ActionType.WAIT, "500")

        page.wait_for_timeout.assert_awaited_once_with(500)

    @pytest.mark.asyncio
    async def test_wait_requires_number(self):
        with pytest.raises(ValueError):
            await PlaywrightPage(make_playwright_page()).execute(ActionType.WAIT, "soon")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("argument", ["500.5", "500ms", " 500"])
    async def test_wait_uses_leading_integer(self, argument):
        """Test that trailing text after the leading integer is ignored."""
        page = make_playwright_page()

        await PlaywrightPage(page).execute(ActionType.WAIT, argument)

        page.wait_for_timeout.assert_awaited_once_with(500)

    @pytest.mark.asyncio
    async def test_sampling_flag_and_buffer(self):
        """Test the scripts used for the sampling flag and the sample buffer."""
        page = make_playwright_page()
        page.evaluate.side_effect = [None, [{"id": "App"}], None]
        handle = PlaywrightPage(page)

        await handle.set_sampling_enabled(True)
        samples = await handle.read_and_clear_samples()

        assert samples == [{"id": "App"}]
        calls = [c.args for c in page.evaluate.await_args_list]
        assert calls == [(SET_SAMPLING_SCRIPT, True), (READ_SAMPLES_SCRIPT,), (RESET_SAMPLES_SCRIPT,)]

    @pytest.mark.asyncio
    async def test_missing_buffer_reads_as_empty(self):
        page = make_playwright_page()
        page.evaluate.return_value = None

        assert await PlaywrightPage(page).read_and_clear_samples() == []

    @pytest.mark.asyncio
    async def test_procedure_receives_playwright_page(self):
        page = make_playwright_page()
        procedure = AsyncMock()

        await PlaywrightPage(page).run_procedure(procedure)

        procedure.assert_awaited_once_with(page)

    @pytest.mark.asyncio
    async def test_close_closes_page_and_context(self):
        page = make_playwright_page()
        context = AsyncMock()
        handle = PlaywrightPage(page, context=context)

        await handle.close()
        await handle.close()

        page.close.assert_awaited()
        context.close.assert_awaited_once()


@pytest.mark.unit
class TestPlaywrightPageProvider:
    """Test cases for PlaywrightPageProvider."""

    @pytest.fixture
    def playwright_mocks(self):
        page = make_playwright_page()
        context = AsyncMock()
        context.new_page.return_value = page
        browser = AsyncMock()
        browser.new_context.return_value = context
        playwright = AsyncMock()
        playwright.chromium.launch.return_value = browser

        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)
        with patch("autoprofiler.automation.page.async_playwright", return_value=starter):
            yield {"playwright": playwright, "browser": browser, "context": context, "page": page}

    @pytest.mark.asyncio
    async def test_launch_and_new_page(self, playwright_mocks, temp_dir):
        """Test launch options and page preparation before navigation."""
        preload = temp_dir / "preload.js"
        preload.write_text("window.profiler = [];")
        cookie = {"name": "session", "value": "abc", "url": "http://localhost:3000"}
        config = BrowserConfig(
            url="http://localhost:3000",
            headless=False,
            browser_args=["--disable-gpu"],
            preload_file=preload,
            cookies=[cookie],
        )

        async with PlaywrightPageProvider(config) as provider:
            handle = await provider.new_page()

        playwright_mocks["playwright"].chromium.launch.assert_awaited_once_with(
            headless=False, args=["--disable-gpu"]
        )
        playwright_mocks["browser"].new_context.assert_awaited_once_with(
            viewport={"width": 1920, "height": 1080}, device_scale_factor=1
        )
        playwright_mocks["context"].add_init_script.assert_awaited_once_with("window.profiler = [];")
        playwright_mocks["context"].add_cookies.assert_awaited_once_with([cookie])
        playwright_mocks["page"].goto.assert_awaited_once_with("http://localhost:3000")
        assert handle.page is playwright_mocks["page"]
        playwright_mocks["browser"].close.assert_awaited_once()
        playwright_mocks["playwright"].stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_new_page_requires_launch(self):
        provider = PlaywrightPageProvider(BrowserConfig(url="http://localhost:3000"))

        with pytest.raises(RuntimeError):
            await provider.new_page()

    @pytest.mark.asyncio
    async def test_launch_failure_stops_playwright(self, playwright_mocks):
        playwright_mocks["playwright"].chromium.launch.side_effect = RuntimeError("no chromium")

        with pytest.raises(RuntimeError):
            async with PlaywrightPageProvider(BrowserConfig(url="http://localhost:3000")):
                pass

        playwright_mocks["playwright"].stop.assert_awaited_once()


@pytest.mark.unit
class TestParseWaitMilliseconds:
    """Test cases for wait delay parsing."""

    @pytest.mark.parametrize(
        "argument, expected",
        [("0", 0), ("250", 250), ("+250", 250), ("1500.9", 1500), ("100px", 100), ("-20", 0)],
    )
    def test_leading_integer(self, argument, expected):
        assert parse_wait_milliseconds(argument) == expected

    @pytest.mark.parametrize("argument", ["", "abc", ".5", "ms500", "-"])
    def test_no_leading_integer(self, argument):
        with pytest.raises(ValueError) as excinfo:
            parse_wait_milliseconds(argument)

        assert "wait expects a number of milliseconds" in str(excinfo.value)
