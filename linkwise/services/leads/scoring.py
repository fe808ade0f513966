"""
ScoreEvaluator: turns a free-text bio into bounded angel/ICP scores.

Uninformative bios are scored with the default score without calling the
evaluation service. Every failure past that gate (request errors, replies
without a JSON object, non-numeric values) also falls back to the default,
so callers always receive a fully populated ScoreResult.
"""

import math
from typing import Any, Optional

from loguru import logger

from .exceptions import EvaluationError
from .json_extract import extract_json_object
from .llm import LLMClient
from .models import BIO_NOT_FOUND, ScoreResult

SCORING_SYSTEM_PROMPT = (
    "You are an expert in startup evaluation. Return only JSON with "
    '"angelScore" and "icpScore" from 0 to 10 based on the bio.'
)

MIN_SCORE = 0.0
MAX_SCORE = 10.0


def clamp_score(value: float) -> float:
    return min(max(value, MIN_SCORE), MAX_SCORE)


def coerce_score(value: Any, default: float) -> float:
    """
    Coerce a reply value to a bounded score.

    Numbers and numeric strings are accepted; anything else (missing, booleans,
    text, NaN) becomes ``default``. The result is clamped to [0, 10].
    """
    if value is None or isinstance(value, bool):
        return clamp_score(default)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return clamp_score(default)
    if math.isnan(number):
        return clamp_score(default)
    return clamp_score(number)


def normalize_scores(payload: Optional[dict[str, Any]], default: float) -> ScoreResult:
    """Build a ScoreResult from a parsed reply, clamping before deriving the final score"""
    payload = payload or {}
    angel = coerce_score(payload.get("angelScore"), default)
    icp = coerce_score(payload.get("icpScore"), default)
    return ScoreResult.from_scores(angel, icp)


class ScoreEvaluator:
    def __init__(
        self,
        llm: LLMClient,
        min_bio_length: int = 80,
        default_score: float = 1.0,
        temperature: float = 0.7,
    ):
        self.llm = llm
        self.min_bio_length = min_bio_length
        self.default_score = clamp_score(default_score)
        self.temperature = temperature

    @property
    def default_result(self) -> ScoreResult:
        return ScoreResult.default(self.default_score)

    def is_informative(self, bio: Optional[str]) -> bool:
        return bool(bio) and bio != BIO_NOT_FOUND and len(bio) >= self.min_bio_length

    async def score(self, bio: Optional[str]) -> ScoreResult:
        """
        Score a bio.

        Args:
            bio: Normalized bio text, possibly the "Bio not found" sentinel

        Returns:
            ScoreResult with all three fields in [0, 10]; never raises
        """
        if not self.is_informative(bio):
            logger.info("Bio too short or not found, assigning default scores")
            return self.default_result

        try:
            reply = await self.llm.complete(
                SCORING_SYSTEM_PROMPT,
                bio,
                temperature=self.temperature,
                purpose="scoring",
            )
        except EvaluationError as e:
            logger.error(f"Failed to score profile: {e}")
            return self.default_result
        except Exception as e:
            logger.error(f"Unexpected error scoring profile: {e}")
            return self.default_result

        try:
            payload = extract_json_object(reply)
            if payload is None:
                logger.warning(f"Scoring reply contained no JSON object: {reply[:200]!r}")
                return self.default_result
            scores = normalize_scores(payload, self.default_score)
        except Exception as e:
            logger.error(f"Unreadable scoring reply: {e}")
            return self.default_result

        logger.info(
            f"Scores: angel={scores.angel_score} icp={scores.icp_score} final={scores.final_score}"
        )
        return scores
