import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger
from playwright.async_api import Playwright, async_playwright

from linkwise.config import Settings, settings as default_settings
from linkwise.core.logging import lead_url_var, log_execution_time, run_id_var
from linkwise.db.db import Database
from linkwise.services.leads.assembler import build_lead_record
from linkwise.services.leads.browser import BrowserSession
from linkwise.services.leads.composer import OutreachComposer
from linkwise.services.leads.exceptions import LeadStoreError, ProfileScrapingError
from linkwise.services.leads.linkedin_outreach import LinkedinOutreach
from linkwise.services.leads.llm import LLMClient
from linkwise.services.leads.models import (
    ExtractedProfile,
    LeadInput,
    LeadRecord,
    OutreachOutcome,
    RunResult,
)
from linkwise.services.leads.profile_scraper import ProfileScraper
from linkwise.services.leads.repo import (
    LeadStore,
    is_storable,
    load_lead_inputs,
    write_snapshot,
)
from linkwise.services.leads.scoring import ScoreEvaluator

BROWSER_ARGS = ["--start-maximized", "--disable-notifications"]


class IService(ABC):
    """
    Service interface for LinkedIn lead enrichment and outreach
    """

    @abstractmethod
    async def enrich_leads(
        self,
        leads: Sequence[LeadInput],
        session: Optional[BrowserSession] = None,
        headless: bool = True,
    ) -> RunResult:
        """
        Log in once, then extract, score and (conditionally) connect with every
        lead in order. Persists the snapshot and pushes to the lead store.

        Raises:
            LinkedInAuthenticationError: When login is exhausted; nothing is persisted
        """
        pass

    @abstractmethod
    async def enrich_leads_from_file(
        self, input_path: str | Path, headless: bool = True
    ) -> RunResult:
        pass


class Service(IService):
    def __init__(
        self,
        evaluator: ScoreEvaluator,
        scraper: ProfileScraper,
        outreach: LinkedinOutreach,
        store: Optional[LeadStore] = None,
        snapshot_path: str | Path = "public/leads_output.json",
        config: Settings = default_settings,
        playwright: Optional[Playwright] = None,
    ):
        self.evaluator = evaluator
        self.scraper = scraper
        self.outreach = outreach
        self.store = store
        self.snapshot_path = Path(snapshot_path)
        self.config = config
        self.playwright = playwright
        self._owns_playwright = False
        self._playwright_instance = None

    @classmethod
    def from_settings(
        cls,
        config: Settings = default_settings,
        use_store: bool = True,
        snapshot_path: Optional[str | Path] = None,
        playwright: Optional[Playwright] = None,
    ) -> "Service":
        """Wire every collaborator from settings"""
        llm = LLMClient.from_api_key(
            config.openai_api_key, model=config.openai_model, max_tokens=config.max_tokens
        )
        evaluator = ScoreEvaluator(
            llm,
            min_bio_length=config.min_bio_length,
            default_score=config.default_score,
            temperature=config.scoring_temperature,
        )
        composer = OutreachComposer(llm, temperature=config.composer_temperature)
        scraper = ProfileScraper(
            navigation_timeout=config.navigation_timeout_ms,
            element_timeout=config.element_timeout_ms,
            scroll_settle=config.scroll_settle_ms,
        )
        outreach = LinkedinOutreach(
            composer,
            threshold=config.outreach_threshold,
            navigation_timeout=config.navigation_timeout_ms,
            element_timeout=config.outreach_timeout_ms,
            settle_delay=config.action_settle_ms,
            typing_delay=config.note_typing_delay_ms,
        )
        store = LeadStore(Database(), table=config.database_table) if use_store else None
        return cls(
            evaluator,
            scraper,
            outreach,
            store=store,
            snapshot_path=snapshot_path or config.output_file,
            config=config,
            playwright=playwright,
        )

    async def __aenter__(self):
        if self.playwright is None:
            self._playwright_instance = async_playwright()
            self.playwright = await self._playwright_instance.__aenter__()
            self._owns_playwright = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_playwright and self._playwright_instance:
            await self._playwright_instance.__aexit__(exc_type, exc_val, exc_tb)

    async def launch_browser(self, headless=True) -> BrowserSession:
        if not self.playwright:
            raise RuntimeError(
                "Playwright not initialized. Use 'async with Service()' context manager."
            )
        browser = await self.playwright.chromium.launch(
            headless=headless,
            slow_mo=self.config.slow_mo_ms,
            args=BROWSER_ARGS,
        )
        return BrowserSession(
            browser,
            email=self.config.linkedin_email,
            password=self.config.linkedin_password,
            max_attempts=self.config.login_max_attempts,
            retry_delay=self.config.login_retry_delay,
            navigation_timeout=self.config.navigation_timeout_ms,
            element_timeout=self.config.element_timeout_ms,
            typing_delay=self.config.typing_delay_ms,
        )

    def _fallback_record(self, lead: LeadInput) -> LeadRecord:
        return build_lead_record(
            lead,
            ExtractedProfile(),
            self.evaluator.default_result,
            email_domain=self.config.email_domain,
            tags=self.config.lead_tags,
        )

    async def process_lead(
        self, session: BrowserSession, lead: LeadInput
    ) -> tuple[LeadRecord, Optional[OutreachOutcome]]:
        """
        Extract, score, assemble and (when the angel score qualifies) connect.

        Never raises: an unexpected failure yields a sentinel record so the
        batch keeps going.
        """
        try:
            profile = await session.get_profile(lead.url, self.scraper)
            score = await self.evaluator.score(profile.bio)
            record = build_lead_record(
                lead,
                profile,
                score,
                email_domain=self.config.email_domain,
                tags=self.config.lead_tags,
            )
        except ProfileScrapingError as e:
            logger.error(str(e))
            return self._fallback_record(lead), None
        except Exception as e:
            logger.exception(f"Failed to process {lead.url}: {e}")
            return self._fallback_record(lead), None

        logger.info(
            f"{record.name} - Angel: {record.angel_score} | ICP: {record.icp_score}"
        )

        if not self.outreach.qualifies(record.angel_score):
            logger.info(
                f"Skipped {record.name}, angelScore too low ({record.angel_score})"
            )
            return record, None

        try:
            outcome = await session.send_connection_request(
                self.outreach, lead.url, record.name, record.bio, record.angel_score
            )
        except Exception as e:
            logger.error(f"Outreach failed for {record.name}: {e}")
            outcome = OutreachOutcome.SKIPPED
        return record, outcome

    async def persist(self, records: Sequence[LeadRecord]) -> int:
        """
        Write the local snapshot, then push valid records to the lead store.

        Returns:
            Number of records stored; 0 when the store is disabled or the push failed
        """
        write_snapshot(self.snapshot_path, records)

        if self.store is None:
            return 0

        storable = [record for record in records if is_storable(record)]
        try:
            if storable:
                await self.store.ensure_table()
            return await self.store.insert_leads(storable)
        except LeadStoreError as e:
            logger.error(f"Lead store push failed, snapshot kept at {self.snapshot_path}: {e}")
            return 0

    @log_execution_time
    async def enrich_leads(
        self,
        leads: Sequence[LeadInput],
        session: Optional[BrowserSession] = None,
        headless: bool = True,
    ) -> RunResult:
        run_id_var.set(uuid.uuid4().hex[:12])
        if session is None:
            session = await self.launch_browser(headless=headless)

        result = RunResult()
        try:
            await session.login()

            for i, lead in enumerate(leads):
                logger.info(f"Processing profile {i + 1}/{len(leads)}: {lead.url}")
                token = lead_url_var.set(lead.url)
                try:
                    record, outcome = await self.process_lead(session, lead)
                finally:
                    lead_url_var.reset(token)

                result.records.append(record)
                if outcome == OutreachOutcome.SENT:
                    result.sent += 1
                elif outcome == OutreachOutcome.SKIPPED:
                    result.skipped += 1
        finally:
            await session.close()

        result.stored = await self.persist(result.records)
        logger.success(
            f"All profiles processed: {len(result.records)} leads, "
            f"{result.sent} invites sent, {result.skipped} skipped, {result.stored} stored"
        )
        return result

    async def enrich_leads_from_file(
        self, input_path: str | Path, headless: bool = True
    ) -> RunResult:
        leads = load_lead_inputs(input_path)
        return await self.enrich_leads(leads, headless=headless)
