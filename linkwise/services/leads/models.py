import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

NAME_NOT_FOUND = "Name not found"
BIO_NOT_FOUND = "Bio not found"
PLATFORM = "LinkedIn"

_WHITESPACE = re.compile(r"\s+")
# Emoji presentation and pictographic ranges
_EMOJI = re.compile(
    "["
    "\U0001f000-\U0001faff"
    "\U00002600-\U000027bf"
    "\U0001f1e6-\U0001f1ff"
    "\u2b00-\u2bff"
    "\ufe0f\u200d"
    "]+"
)


def normalize_text(text: Optional[str]) -> str:
    """Collapse internal whitespace to single spaces and trim the ends"""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def sanitize_name(name: Optional[str]) -> str:
    """Strip emoji from a display name, then normalize whitespace"""
    if not name:
        return ""
    return normalize_text(_EMOJI.sub("", name))


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class OutreachOutcome(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"


class LeadInput(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None


class ExtractedProfile(BaseModel):
    name: str = NAME_NOT_FOUND
    bio: str = BIO_NOT_FOUND

    @property
    def has_name(self) -> bool:
        return self.name != NAME_NOT_FOUND


class ScoreResult(BaseModel):
    """Bounded lead scores. Build with from_scores so final_score stays derived."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    angel_score: float = Field(ge=0, le=10, alias="angelScore")
    icp_score: float = Field(ge=0, le=10, alias="icpScore")
    final_score: float = Field(ge=0, le=10, alias="finalScore")

    @classmethod
    def from_scores(cls, angel_score: float, icp_score: float) -> "ScoreResult":
        return cls(
            angel_score=angel_score,
            icp_score=icp_score,
            final_score=(angel_score + icp_score) / 2,
        )

    @classmethod
    def default(cls, value: float) -> "ScoreResult":
        return cls.from_scores(value, value)


class LeadRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    bio: str
    url: str
    email: str
    platform: str = PLATFORM
    angel_score: float = Field(alias="angelScore")
    icp_score: float = Field(alias="icpScore")
    final_score: float = Field(alias="finalScore")
    tags: str = "auto"
    meeting_scheduled: bool = False
    meeting_time: Optional[datetime] = None
    created_at: datetime

    def to_row(self) -> dict:
        """Serialize with the column names the lead store uses"""
        return self.model_dump(mode="json", by_alias=True)


class RunResult(BaseModel):
    records: list[LeadRecord] = []
    sent: int = 0
    skipped: int = 0
    stored: int = 0

    def __len__(self) -> int:
        return len(self.records)
