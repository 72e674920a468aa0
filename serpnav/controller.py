import asyncio
import random
import time
from pathlib import Path
from loguru import logger
from .browser import BrowserSession, PlaywrightSession, SessionFactory
from .extraction import NO_DATA
from .metrics import AttemptResult, RunReport
from .retry import AttemptOutcome, RetryPolicy, RunState
from .settings import RunConfig
from .storage import SCREENSHOTS_DIR
from .utils import epoch_ms, pick_user_agent


class SessionController:
    """
    Drives a bounded number of attempts to reach `target_domain` through
    a search engine results page.

    Each attempt opens a fresh browser session, searches, clicks the first
    result whose href contains the target domain and, when an extractor is
    configured, scrapes the landed page. The session is always closed
    before the next attempt (or before run() returns).
    """

    def __init__(
        self,
        config: RunConfig,
        session_factory: SessionFactory = PlaywrightSession,
        extractor=None,
        sleep=asyncio.sleep,
        rng=random,
    ):
        self.config = config
        self.session_factory = session_factory
        self.extractor = extractor
        self.policy = RetryPolicy(max_retries=config.max_retries, cooldown_s=config.cooldown_s)
        self._sleep = sleep
        self._rng = rng
        self.screenshot_dir = config.output_path / SCREENSHOTS_DIR

    async def run(self) -> RunReport:
        report = RunReport(state=RunState.ATTEMPTING)
        attempt = 0

        while not report.state.terminal:
            if report.state is RunState.COOLDOWN:
                logger.info(f"Waiting {self.policy.cooldown_s:g}s before next attempt")
                await self._sleep(self.policy.cooldown_s)
                report.state = RunState.ATTEMPTING
                continue

            attempt += 1
            result = await self._attempt(attempt)
            report.attempts.append(result)
            report.state = self.policy.next_state(attempt, result.outcome)

        if report.succeeded:
            logger.success(f"Run finished: reached {self.config.target_domain} on attempt {attempt}")
        else:
            logger.warning(f"Run finished: {self.config.target_domain} not reached after {attempt} attempt(s)")
        return report

    async def _attempt(self, index: int) -> AttemptResult:
        user_agent = pick_user_agent(self.config.rotate_user_agent, self.config.user_agent, self._rng)
        result = AttemptResult(index=index, outcome=AttemptOutcome.ERROR, user_agent=user_agent)
        logger.info(f"Attempt {index}/{self.policy.max_retries}")

        t0 = time.perf_counter()
        session = None
        try:
            session = self.session_factory(self.config, user_agent)
            await session.open()
            result.outcome = await self._search_and_click(session, result)
        except Exception as e:
            result.outcome = AttemptOutcome.ERROR
            result.error_type = type(e).__name__
            result.error = str(e)
            logger.error(f"Attempt {index} failed: {result.error_type}: {e}")
        finally:
            if session is not None:
                await self._release(session)
            result.ttl_s = time.perf_counter() - t0

        return result

    async def _search_and_click(self, session: BrowserSession, result: AttemptResult) -> AttemptOutcome:
        url = self.config.search_url()
        logger.info(f"Searching: {url}")
        await session.navigate(url)
        await session.wait_for_idle()
        await self._screenshot(session, "search")

        links = await session.find_links(self.config.target_domain)
        if not links:
            logger.warning(f"No links containing {self.config.target_domain} on results page")
            return AttemptOutcome.NO_MATCH

        result.clicked_url = links[0]
        logger.info(f"Found {len(links)} matching link(s), clicking {links[0]}")
        await session.click_and_wait(links[0])
        await self._screenshot(session, "target")

        result.title = await session.title()
        logger.info(f"Landed on: {result.title}")

        if self.extractor is not None:
            records = await self.extractor.run(session)
            if records is not NO_DATA:
                result.records = len(records) if isinstance(records, list) else None

        return AttemptOutcome.SUCCESS

    async def _screenshot(self, session: BrowserSession, prefix: str) -> Path | None:
        if not self.config.screenshots:
            return None
        path = self.screenshot_dir / f"{prefix}-{epoch_ms()}.png"
        await session.screenshot(str(path))
        logger.info(f"Screenshot saved: {path}")
        return path

    async def _release(self, session: BrowserSession) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Error closing browser session: {type(e).__name__}: {e}")
