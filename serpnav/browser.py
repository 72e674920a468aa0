from typing import Any, Callable, Protocol
from playwright.async_api import async_playwright
from .settings import RunConfig


class BrowserSession(Protocol):
    """
    The narrow slice of a browser the controller and extractor rely on.

    Implemented by PlaywrightSession for real runs and by fakes in tests.
    """

    async def open(self) -> None: ...

    async def navigate(self, url: str) -> None: ...

    async def wait_for_idle(self) -> None: ...

    async def find_links(self, substring: str) -> list[str]: ...

    async def click_and_wait(self, href: str) -> None: ...

    async def screenshot(self, path: str) -> None: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    async def title(self) -> str: ...

    async def close(self) -> None: ...


SessionFactory = Callable[[RunConfig, str | None], BrowserSession]


# Absolute hrefs of all anchors whose href contains the given substring, in document order.
FIND_LINKS_JS = """
(substring) => Array.from(document.querySelectorAll('a[href]'))
    .map(a => a.href)
    .filter(href => href.includes(substring))
"""

FIND_ANCHOR_JS = """
(href) => Array.from(document.querySelectorAll('a[href]')).find(a => a.href === href) || null
"""


class PlaywrightSession:
    """
    Single Chromium session driven through Playwright.

    - One browser + one context + one page per session
    - Supports proxy authentication
    - Configurable user agent, locale, headless mode and timeouts
    - close() is safe to call more than once
    """

    name = "playwright"

    def __init__(self, config: RunConfig, user_agent: str | None = None):
        self.config = config
        self.user_agent = user_agent

        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    async def open(self) -> None:
        self._playwright = await async_playwright().start()

        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless,
            proxy=self.config.proxy.playwright_proxy(),
        )

        context_args = {"locale": self.config.locale}
        if self.user_agent:
            context_args["user_agent"] = self.user_agent
        self._context = await self._browser.new_context(**context_args)
        self._context.set_default_timeout(self.config.timeout_ms)
        self._context.set_default_navigation_timeout(self.config.timeout_ms)

        self._page = await self._context.new_page()

    async def close(self) -> None:
        page, context, browser, pw = self._page, self._context, self._browser, self._playwright
        self._page = self._context = self._browser = self._playwright = None
        try:
            if page:
                await page.close()
            if context:
                await context.close()
            if browser:
                await browser.close()
        finally:
            if pw:
                await pw.stop()

    @property
    def page(self):
        if self._page is None:
            raise RuntimeError("Browser session is not open")
        return self._page

    async def navigate(self, url: str) -> None:
        await self.page.goto(url, timeout=self.config.timeout_ms, wait_until="domcontentloaded")

    async def wait_for_idle(self) -> None:
        await self.page.wait_for_load_state("networkidle", timeout=self.config.timeout_ms)

    async def find_links(self, substring: str) -> list[str]:
        return await self.page.evaluate(FIND_LINKS_JS, substring)

    async def click_and_wait(self, href: str) -> None:
        handle = await self.page.evaluate_handle(FIND_ANCHOR_JS, href)
        anchor = handle.as_element()
        if anchor is None:
            await handle.dispose()
            raise LookupError(f"Link no longer on page: {href}")

        try:
            async with self.page.expect_navigation(timeout=self.config.timeout_ms, wait_until="load"):
                await anchor.click()
        finally:
            await handle.dispose()

    async def screenshot(self, path: str) -> None:
        await self.page.screenshot(path=path, full_page=True)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    async def title(self) -> str:
        return await self.page.title()
