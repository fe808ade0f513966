from typing import Awaitable, Callable, Optional, Sequence

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import NavigationError
from .models import BIO_NOT_FOUND, NAME_NOT_FOUND, ExtractedProfile, normalize_text, sanitize_name
from .navigation import navigate_to_linkedin_url

# Exception handling note:
# AttributeError is caught alongside Playwright errors because element handles
# can be detached from the DOM between lookup and text extraction on pages that
# keep re-rendering.

NAME_SELECTOR = ".text-heading-xlarge"

BioStrategy = Callable[[Page], Awaitable[Optional[str]]]


def selector_strategy(selector: str) -> BioStrategy:
    """Build a strategy returning the text of the first element matching selector"""

    async def strategy(page: Page) -> Optional[str]:
        element = await page.query_selector(selector)
        if element is None:
            return None
        return await element.text_content()

    strategy.__name__ = f"selector[{selector}]"
    return strategy


async def about_section_strategy(page: Page) -> Optional[str]:
    """Whole text of any section whose id mentions "about"."""
    return await page.evaluate(
        """() => {
            const aboutSection = document.querySelector('section[id*="about"]');
            return aboutSection ? aboutSection.textContent : null;
        }"""
    )


# Most specific first, so decoy elements elsewhere on the page are not picked up
DEFAULT_BIO_STRATEGIES: tuple[BioStrategy, ...] = (
    selector_strategy('div[data-section="about"] .pv-about__summary-text'),
    selector_strategy("section.pv-about-section .pv-about__summary-text"),
    selector_strategy(".pv-profile-section__section-info--text"),
    about_section_strategy,
    selector_strategy(".text-body-medium.break-words"),
)


class ProfileScraper:
    """Extracts name and bio from a LinkedIn profile page.

    extract() never raises: every miss degrades to the "Name not found" /
    "Bio not found" sentinels so the caller can keep going.
    """

    def __init__(
        self,
        bio_strategies: Sequence[BioStrategy] = DEFAULT_BIO_STRATEGIES,
        navigation_timeout: int = 20000,
        element_timeout: int = 20000,
        scroll_settle: int = 6000,
    ):
        self.bio_strategies = tuple(bio_strategies)
        self.navigation_timeout = navigation_timeout
        self.element_timeout = element_timeout
        self.scroll_settle = scroll_settle

    async def extract(self, page: Page, url: str) -> ExtractedProfile:
        logger.info(f"Loading profile: {url}")
        try:
            await navigate_to_linkedin_url(page, url, timeout=self.navigation_timeout)
        except NavigationError as e:
            logger.error(f"Error loading profile {url}: {e}")
            return ExtractedProfile()

        name = NAME_NOT_FOUND
        bio = BIO_NOT_FOUND
        try:
            name = await self._extract_name(page) or NAME_NOT_FOUND
            await self._load_lazy_content(page)
            bio = await self.extract_bio(page) or BIO_NOT_FOUND
        except Exception as e:
            logger.error(f"Unexpected error scraping profile {url}: {e}")

        return ExtractedProfile(name=name, bio=bio)

    async def _extract_name(self, page: Page) -> Optional[str]:
        try:
            element = await page.wait_for_selector(NAME_SELECTOR, timeout=self.element_timeout)
            if element is None:
                return None
            return sanitize_name(await element.text_content()) or None
        except (PlaywrightTimeoutError, PlaywrightError, AttributeError) as e:
            logger.warning(f"Name element not found: {e}")
            return None

    async def _load_lazy_content(self, page: Page) -> None:
        """Scroll to the bottom so below-the-fold sections render, then let them settle"""
        try:
            await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
        except PlaywrightError as e:
            logger.debug(f"Scroll to bottom failed: {e}")
        await page.wait_for_timeout(self.scroll_settle)

    async def extract_bio(self, page: Page) -> Optional[str]:
        """Try each bio strategy in order; the first non-empty text wins"""
        for strategy in self.bio_strategies:
            name = getattr(strategy, "__name__", repr(strategy))
            try:
                text = normalize_text(await strategy(page))
            except (PlaywrightTimeoutError, PlaywrightError, AttributeError) as e:
                logger.debug(f"Bio strategy {name} failed: {e}")
                continue
            except Exception as e:
                logger.warning(f"Unexpected error in bio strategy {name}: {e}")
                continue

            if text:
                logger.debug(f"Bio found with strategy {name}")
                return text

        logger.warning("Bio not found with any strategy")
        return None
