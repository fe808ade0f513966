import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from linkwise.config import settings
from linkwise.core.logging import setup_json_logging
from linkwise.db.db import close_pool
from linkwise.services.leads.exceptions import InputError, LinkedInAuthenticationError
from linkwise.services.leads.llm import LLMClient
from linkwise.services.leads.repo import load_lead_inputs
from linkwise.services.leads.scoring import ScoreEvaluator
from linkwise.services.leads.service import Service

app = typer.Typer()


@app.command()
def enrich(
    input_file: Optional[Path] = typer.Option(
        None, "--input", "-i", help="JSON array of profiles to process (default: INPUT_FILE)"
    ),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Where to write the lead snapshot (default: OUTPUT_FILE)"
    ),
    show_browser: Optional[bool] = typer.Option(
        None, "--show-browser/--headless", help="Run the browser with a visible window"
    ),
    no_store: bool = typer.Option(
        False, "--no-store", help="Only write the local snapshot, skip the lead store"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON formatted logs"),
):
    """
    Enrich LinkedIn profiles into scored leads and send connection requests.

    Examples:
        # Use INPUT_FILE / OUTPUT_FILE from the environment
        linkwise enrich

        # Watch the browser while it works, keep results local
        linkwise enrich --input profiles.json --show-browser --no-store
    """
    if json_logs:
        setup_json_logging()

    missing = settings.missing_credentials()
    if missing:
        logger.error(f"Missing environment variables: {', '.join(missing)}")
        raise typer.Exit(code=1)

    try:
        leads = load_lead_inputs(input_file or settings.input_file)
    except InputError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    headless = settings.browser_headless if show_browser is None else not show_browser

    async def run():
        try:
            async with Service.from_settings(
                settings, use_store=not no_store, snapshot_path=output_file
            ) as service:
                return await service.enrich_leads(leads, headless=headless)
        finally:
            await close_pool()

    try:
        result = asyncio.run(run())
    except LinkedInAuthenticationError as e:
        logger.error(f"Aborting run: {e}")
        raise typer.Exit(code=1)

    print(f"Processed {len(result)} leads")
    print(f"  Invites sent: {result.sent}")
    print(f"  Invites skipped: {result.skipped}")
    print(f"  Stored: {result.stored}")


@app.command()
def score_bio(
    bio: str = typer.Argument(..., help="Profile bio text to score"),
):
    """Score a single bio and print the result as JSON"""
    try:
        llm = LLMClient.from_api_key(
            settings.openai_api_key, model=settings.openai_model, max_tokens=settings.max_tokens
        )
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)

    evaluator = ScoreEvaluator(
        llm,
        min_bio_length=settings.min_bio_length,
        default_score=settings.default_score,
        temperature=settings.scoring_temperature,
    )
    result = asyncio.run(evaluator.score(bio))
    print(json.dumps(result.model_dump(by_alias=True)))
