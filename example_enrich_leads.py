#!/usr/bin/env python3
"""
Example usage of the lead enrichment pipeline

Enriches a handful of profiles without touching the lead store. Requires
LINKEDIN_EMAIL, LINKEDIN_PASSWORD and OPENAI_API_KEY in the environment.
"""

import asyncio
from linkwise.config import settings
from linkwise.services.leads.models import LeadInput
from linkwise.services.leads.service import Service


async def main():
    leads = [
        LeadInput(url="https://www.linkedin.com/in/john-doe-123"),
        LeadInput(url="https://www.linkedin.com/in/jane-smith-456", name="Jane Smith"),
        LeadInput(
            url="https://www.linkedin.com/in/bob-wilson-789",
            email="bob@wilson.vc",
        ),
    ]

    async with Service.from_settings(
        settings, use_store=False, snapshot_path="public/example_leads.json"
    ) as service:
        result = await service.enrich_leads(
            leads,
            headless=True,  # set to False to watch the browser
        )

    print("\n--- Lead Enrichment Results ---")
    for record in result.records:
        print(f"{record.name}: angel {record.angel_score} | icp {record.icp_score} | final {record.final_score}")

    print(f"\nSummary: {result.sent}/{len(result)} connection requests sent")


if __name__ == "__main__":
    asyncio.run(main())
