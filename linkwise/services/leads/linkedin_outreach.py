"""
LinkedinOutreach: sends connection requests to high-scoring leads.

Done sequentially with a fixed pause after every request to emulate human
behavior and stay under LinkedIn's invitation rate limits.

Per-lead state machine:
    NotStarted -> Navigated -> InviteClicked -> [NoteOpened -> MessageTyped] -> Sent
    Any step may end in Skipped instead (no invite button, no send button, any error).
"""

from typing import Optional

from loguru import logger
from playwright.async_api import ElementHandle, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .composer import OutreachComposer
from .models import OutreachOutcome
from .navigation import navigate_to_linkedin_url

INVITE_SELECTOR = 'button[aria-label*="Invite"]'
ADD_NOTE_SELECTOR = 'button[aria-label="Add a note"]'
NOTE_FIELD_SELECTOR = "#connect-cta-form__invitation"
SEND_SELECTOR = 'button[aria-label="Send now"]'


class LinkedinOutreach:
    def __init__(
        self,
        composer: OutreachComposer,
        threshold: float = 7.0,
        navigation_timeout: int = 20000,
        element_timeout: int = 12000,
        settle_delay: int = 6000,
        typing_delay: int = 50,
    ):
        self.composer = composer
        self.threshold = threshold
        self.navigation_timeout = navigation_timeout
        self.element_timeout = element_timeout
        self.settle_delay = settle_delay
        self.typing_delay = typing_delay

    def qualifies(self, angel_score: float) -> bool:
        return angel_score >= self.threshold

    async def _wait_optional(self, page: Page, selector: str) -> Optional[ElementHandle]:
        """Wait for an element that may legitimately never appear"""
        try:
            return await page.wait_for_selector(selector, timeout=self.element_timeout)
        except PlaywrightTimeoutError:
            return None

    async def _send_request(
        self, page: Page, url: str, name: str, bio: str, angel_score: float
    ) -> OutreachOutcome:
        await navigate_to_linkedin_url(page, url, timeout=self.navigation_timeout)

        invite_button = await page.query_selector(INVITE_SELECTOR)
        if not invite_button:
            logger.warning(f"No connect button found for {name}")
            return OutreachOutcome.SKIPPED

        await invite_button.click()
        logger.info(f"Clicked connect button for {name}")

        message = None
        add_note_button = await self._wait_optional(page, ADD_NOTE_SELECTOR)
        if add_note_button:
            await add_note_button.click()
            message = await self.composer.compose(bio, name, angel_score)
            await page.type(NOTE_FIELD_SELECTOR, message, delay=self.typing_delay)
            logger.info(f"Added note for {name}")
        else:
            logger.info(f"No note option for {name}, sending without a message")

        send_button = await self._wait_optional(page, SEND_SELECTOR)
        if not send_button:
            logger.warning(f"Cannot send invite to {name}: send button not found")
            return OutreachOutcome.SKIPPED

        await send_button.click()
        if message:
            logger.success(f"Connection request sent to {name}: {message}")
        else:
            logger.success(f"Connection request sent to {name}")
        return OutreachOutcome.SENT

    async def connect(
        self, page: Page, url: str, name: str, bio: str, angel_score: float
    ) -> OutreachOutcome:
        """
        Send a connection request, with a personalized note when LinkedIn offers one.

        Args:
            page: Authenticated Playwright page
            url: Profile URL
            name: Lead name used in the note and logs
            bio: Lead bio used to personalize the note
            angel_score: Score passed to the note composer

        Returns:
            OutreachOutcome.SENT or OutreachOutcome.SKIPPED; never raises
        """
        try:
            outcome = await self._send_request(page, url, name, bio, angel_score)
        except Exception as e:
            logger.error(f"Error connecting to {name}: {e}")
            outcome = OutreachOutcome.SKIPPED

        try:
            await page.wait_for_timeout(self.settle_delay)
        except Exception as e:
            logger.debug(f"Settle delay interrupted: {e}")

        return outcome
