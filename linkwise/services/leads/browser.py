import asyncio
from typing import Optional

from loguru import logger
from playwright.async_api import Browser, Page

from .exceptions import LinkedInAuthenticationError, ProfileScrapingError
from .linkedin_outreach import LinkedinOutreach
from .models import ExtractedProfile, OutreachOutcome, SessionState
from .navigation import LOGIN_URL
from .profile_scraper import ProfileScraper


class BrowserSession:
    """
    Single authenticated LinkedIn session shared by every lead in a run.

    The page is created once, logged in once, then only navigated. close()
    tears the browser down exactly once.
    """

    def __init__(
        self,
        browser: Browser,
        email: Optional[str],
        password: Optional[str],
        max_attempts: int = 3,
        retry_delay: float = 5.0,
        navigation_timeout: int = 20000,
        element_timeout: int = 20000,
        typing_delay: int = 150,
    ):
        self.browser = browser
        self.email = email
        self.password = password
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.navigation_timeout = navigation_timeout
        self.element_timeout = element_timeout
        self.typing_delay = typing_delay
        self.page: Optional[Page] = None
        self.state = SessionState.UNAUTHENTICATED

    async def _setup_page(self) -> Page:
        """Set up or reuse the session page"""
        if self.page is None:
            self.page = await self.browser.new_page()
            self.page.set_default_timeout(60000)
        return self.page

    async def _attempt_login(self, page: Page) -> None:
        await page.goto(LOGIN_URL, wait_until="networkidle", timeout=self.navigation_timeout)
        await page.wait_for_selector("#username", timeout=self.element_timeout)
        await page.type("#username", self.email, delay=self.typing_delay)
        await page.type("#password", self.password, delay=self.typing_delay)
        await page.click('button[type="submit"]')
        await page.wait_for_url(
            lambda url: "/login" not in url,
            wait_until="networkidle",
            timeout=self.navigation_timeout,
        )

        if "linkedin.com/checkpoint" in page.url:
            raise LinkedInAuthenticationError(
                f"LinkedIn requested a security checkpoint: {page.url}"
            )

    async def login(self) -> None:
        """
        Log in with the configured credentials.

        Retries up to max_attempts times with a fixed delay between attempts.

        Raises:
            LinkedInAuthenticationError: When credentials are missing or every
                attempt failed. The run cannot continue unauthenticated.
        """
        if self.state == SessionState.AUTHENTICATED:
            return
        if self.state == SessionState.CLOSED:
            raise LinkedInAuthenticationError("Cannot log in on a closed session")
        if not self.email or not self.password:
            raise LinkedInAuthenticationError("LinkedIn email and password are required")

        page = await self._setup_page()
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                await self._attempt_login(page)
                self.state = SessionState.AUTHENTICATED
                logger.success("Logged in successfully to LinkedIn")
                return
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Login attempt {attempt}/{self.max_attempts} failed: {e}"
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay)

        logger.error(f"Login failed after {self.max_attempts} attempts")
        raise LinkedInAuthenticationError(
            f"LinkedIn login failed after {self.max_attempts} attempts: {last_error}"
        ) from last_error

    def _require_page(self) -> Page:
        if self.state != SessionState.AUTHENTICATED or self.page is None:
            raise LinkedInAuthenticationError("Session is not authenticated. Call login() first.")
        return self.page

    async def get_profile(self, url: str, scraper: ProfileScraper) -> ExtractedProfile:
        """
        Extract name and bio from a profile URL using the authenticated page.

        Raises:
            ProfileScrapingError: When the scraper itself fails instead of
                degrading to sentinels
        """
        page = self._require_page()
        try:
            return await scraper.extract(page, url)
        except Exception as e:
            raise ProfileScrapingError(f"Failed to scrape {url}: {e}") from e

    async def send_connection_request(
        self,
        outreach: LinkedinOutreach,
        url: str,
        name: str,
        bio: str,
        angel_score: float,
    ) -> OutreachOutcome:
        return await outreach.connect(self._require_page(), url, name, bio, angel_score)

    async def close(self) -> None:
        if self.state == SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        try:
            await self.browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")
        self.page = None
