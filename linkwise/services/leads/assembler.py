import re
from datetime import datetime, timezone
from typing import Optional

from .models import (
    NAME_NOT_FOUND,
    PLATFORM,
    ExtractedProfile,
    LeadInput,
    LeadRecord,
    ScoreResult,
    sanitize_name,
)

_WHITESPACE = re.compile(r"\s+")


def placeholder_email(name: str, domain: str = "mockemail.com") -> str:
    """Synthetic, unverified address derived from the lead name"""
    local_part = _WHITESPACE.sub(".", name.strip().lower())
    return f"{local_part}@{domain}"


def build_lead_record(
    lead: LeadInput,
    profile: ExtractedProfile,
    score: ScoreResult,
    email_domain: str = "mockemail.com",
    tags: str = "auto",
    now: Optional[datetime] = None,
) -> LeadRecord:
    """Merge extraction, scoring and input metadata into a persistable record"""
    name = profile.name
    if not profile.has_name and lead.name:
        name = sanitize_name(lead.name) or NAME_NOT_FOUND

    return LeadRecord(
        name=name,
        bio=profile.bio,
        url=lead.url,
        email=lead.email or placeholder_email(name, email_domain),
        platform=PLATFORM,
        angel_score=score.angel_score,
        icp_score=score.icp_score,
        final_score=score.final_score,
        tags=tags,
        meeting_scheduled=False,
        meeting_time=None,
        created_at=now or datetime.now(timezone.utc),
    )
