# Purpose: The only code that touches the live storefront. Every click/fill waits
# for its target to become visible first; a wait that runs out is fatal for the run.
# The orchestrator talks to the narrow Page protocol so tests can use a fake.

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol

from playwright.sync_api import Page as PlaywrightPageHandle
from playwright.sync_api import Playwright, TimeoutError

from orderAI.config import config
from orderAI.exceptions import DriverTimeoutError
from orderAI.logging_config import get_logger

logger = get_logger(__name__)


class Page(Protocol):
    def goto(self, url: str) -> None: ...

    def click(self, locator: str) -> None: ...

    def fill(self, locator: str, value: str) -> None: ...

    def text_content(self, locator: str) -> str: ...


class PlaywrightPage:
    """Wait-then-act wrapper around a Playwright page.

    ``retries`` extra visibility checks are made, ``retry_delay_ms`` apart,
    before a timeout is raised as ``DriverTimeoutError``.
    """

    def __init__(
        self,
        page: PlaywrightPageHandle,
        timeout_ms: int = config.ORDER_TIMEOUT_MS,
        retries: int = config.ORDER_ACTION_RETRIES,
        retry_delay_ms: int = config.ORDER_RETRY_DELAY_MS,
    ):
        self._page = page
        self.timeout_ms = timeout_ms
        self.retries = retries
        self.retry_delay_ms = retry_delay_ms

    def goto(self, url: str) -> None:
        self._page.goto(url, timeout=self.timeout_ms)

    def _wait(self, locator: str, state: str = "visible"):
        loc = self._page.locator(locator).first
        for attempt in range(self.retries + 1):
            try:
                loc.wait_for(state=state, timeout=self.timeout_ms)
                return loc
            except TimeoutError:
                if attempt == self.retries:
                    raise DriverTimeoutError(locator, self.timeout_ms, state)
                logger.warning(
                    "'%s' not %s after %sms (attempt %s/%s), retrying",
                    locator, state, self.timeout_ms, attempt + 1, self.retries + 1,
                )
                time.sleep(self.retry_delay_ms / 1000)

    def click(self, locator: str) -> None:
        self._wait(locator).click()

    def fill(self, locator: str, value: str) -> None:
        self._wait(locator).fill(value)

    def text_content(self, locator: str) -> str:
        return self._wait(locator, state="attached").text_content() or ""


# Launch a persistent Chromium context (profile + optional video recording) and
# always close it, including when the run raises.
@contextmanager
def launch_browser(playwright: Playwright, profile_dir: Optional[str] = None) -> Iterator[PlaywrightPage]:
    profile_path = Path(profile_dir or config.ORDER_PROFILE_DIR)
    profile_path.mkdir(parents=True, exist_ok=True)
    options = {
        "headless": config.HEADLESS_MODE,
        "slow_mo": config.BROWSER_SLOW_MO,
        "viewport": {"width": 1280, "height": 800},
    }
    if config.ORDER_VIDEO_DIR:
        options["record_video_dir"] = config.ORDER_VIDEO_DIR

    context = playwright.chromium.launch_persistent_context(str(profile_path), **options)
    try:
        page = context.pages[0] if context.pages else context.new_page()
        yield PlaywrightPage(page)
    finally:
        print("Closing browser...")
        context.close()
