"""
Navigation utilities for LinkedIn browser automation
"""
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from loguru import logger

from .exceptions import NavigationError

LOGIN_URL = "https://www.linkedin.com/login"


async def navigate_to_linkedin_url(page: Page, url: str, timeout: int = 20000) -> None:
    """
    Navigate to a LinkedIn URL and wait for the network to go idle

    Args:
        page: Playwright page instance (must be initialized)
        url: URL to navigate to
        timeout: Milliseconds to wait for the network-idle signal

    Raises:
        NavigationError: When the page cannot be loaded at all or LinkedIn
            redirects to the login/checkpoint wall
    """
    if not page:
        raise NavigationError("Page not initialized. Call setup page method first.")

    logger.info(f"Navigating to: {url}")

    try:
        await page.goto(url, wait_until="networkidle", timeout=timeout)
    except PlaywrightTimeoutError:
        # LinkedIn keeps long-polling connections open; the DOM is usually usable anyway
        logger.warning(f"Network did not go idle within {timeout}ms for {url}, continuing")
    except Exception as e:
        raise NavigationError(f"Navigation to {url} failed: {e}") from e

    final_url = page.url
    if "linkedin.com/login" in final_url or "linkedin.com/checkpoint" in final_url:
        raise NavigationError(
            "Redirected to LinkedIn login page. The session is no longer authenticated."
        )
