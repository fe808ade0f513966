import pytest
from unittest.mock import AsyncMock, MagicMock

from linkwise.services.leads.exceptions import EvaluationError
from linkwise.services.leads.models import BIO_NOT_FOUND
from linkwise.services.leads.scoring import (
    ScoreEvaluator,
    SCORING_SYSTEM_PROMPT,
    coerce_score,
    normalize_scores,
)

LONG_BIO = (
    "Serial founder and angel investor backing early-stage climate and fintech "
    "startups across Europe, previously CTO at a Series B payments company."
)


def make_evaluator(reply=None, side_effect=None, **kwargs) -> ScoreEvaluator:
    llm = MagicMock()
    llm.complete = AsyncMock(return_value=reply, side_effect=side_effect)
    return ScoreEvaluator(llm, **kwargs)


@pytest.mark.unit
class TestCoerceScore:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (8, 8.0),
            (7.5, 7.5),
            ("6", 6.0),
            (" 4.5 ", 4.5),
            (0, 0.0),
            (15, 10.0),
            (-3, 0.0),
            (float("inf"), 10.0),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert coerce_score(value, default=1.0) == expected

    @pytest.mark.parametrize("value", [None, "high", [], {}, True, float("nan"), int("9" * 400)])
    def test_non_numeric_values_use_default(self, value):
        assert coerce_score(value, default=1.0) == 1.0

    def test_default_itself_is_clamped(self):
        assert coerce_score(None, default=12.0) == 10.0


@pytest.mark.unit
class TestNormalizeScores:
    def test_out_of_range_values_are_clamped_before_final(self):
        scores = normalize_scores({"angelScore": 15, "icpScore": -3}, default=1.0)

        assert scores.angel_score == 10
        assert scores.icp_score == 0
        assert scores.final_score == 5

    def test_missing_key_uses_default(self):
        scores = normalize_scores({"angelScore": 9}, default=1.0)

        assert scores.angel_score == 9
        assert scores.icp_score == 1.0
        assert scores.final_score == 5.0

    def test_none_payload_is_all_default(self):
        scores = normalize_scores(None, default=0.0)
        assert (scores.angel_score, scores.icp_score, scores.final_score) == (0, 0, 0)


@pytest.mark.unit
class TestScoreEvaluator:
    @pytest.mark.asyncio
    async def test_reply_with_prose_around_json(self):
        evaluator = make_evaluator('Sure! {"angelScore":8,"icpScore":6}')

        scores = await evaluator.score(LONG_BIO)

        assert scores.angel_score == 8
        assert scores.icp_score == 6
        assert scores.final_score == 7
        evaluator.llm.complete.assert_awaited_once()
        args, kwargs = evaluator.llm.complete.call_args
        assert args == (SCORING_SYSTEM_PROMPT, LONG_BIO)
        assert kwargs["temperature"] == 0.7

    @pytest.mark.asyncio
    async def test_out_of_range_reply_is_clamped(self):
        evaluator = make_evaluator('{"angelScore":15,"icpScore":-3}')

        scores = await evaluator.score(LONG_BIO)

        assert (scores.angel_score, scores.icp_score, scores.final_score) == (10, 0, 5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bio", ["", None, BIO_NOT_FOUND, "Founder @ Acme. Angel investor."])
    async def test_uninformative_bio_skips_service(self, bio):
        evaluator = make_evaluator('{"angelScore":9,"icpScore":9}', min_bio_length=40)

        scores = await evaluator.score(bio)

        assert (scores.angel_score, scores.icp_score, scores.final_score) == (1, 1, 1)
        evaluator.llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bio_at_threshold_is_scored(self):
        evaluator = make_evaluator('{"angelScore":4,"icpScore":2}', min_bio_length=40)

        scores = await evaluator.score("x" * 40)

        assert scores.final_score == 3
        evaluator.llm.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_configurable_default_score(self):
        evaluator = make_evaluator(None, default_score=0.0)

        scores = await evaluator.score("short")

        assert (scores.angel_score, scores.icp_score, scores.final_score) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_service_failure_returns_default(self):
        evaluator = make_evaluator(side_effect=EvaluationError("scoring request failed"))

        scores = await evaluator.score(LONG_BIO)

        assert scores == evaluator.default_result

    @pytest.mark.asyncio
    async def test_unexpected_failure_returns_default(self):
        evaluator = make_evaluator(side_effect=RuntimeError("boom"))

        scores = await evaluator.score(LONG_BIO)

        assert scores == evaluator.default_result

    @pytest.mark.asyncio
    async def test_reply_without_json_returns_default(self):
        evaluator = make_evaluator("I cannot score this profile.")

        scores = await evaluator.score(LONG_BIO)

        assert scores == evaluator.default_result

    @pytest.mark.asyncio
    async def test_oversized_integer_falls_back_per_field(self):
        evaluator = make_evaluator('{"angelScore": ' + "9" * 400 + ', "icpScore": 5}')

        scores = await evaluator.score(LONG_BIO)

        assert scores.angel_score == 1.0
        assert scores.icp_score == 5.0
        assert scores.final_score == 3.0

    @pytest.mark.asyncio
    async def test_deeply_nested_reply_returns_default(self):
        evaluator = make_evaluator('{"a": ' * 100000 + "1" + "}" * 100000)

        scores = await evaluator.score(LONG_BIO)

        assert scores == evaluator.default_result

    @pytest.mark.asyncio
    async def test_non_numeric_values_fall_back_per_field(self):
        evaluator = make_evaluator('{"angelScore": "high", "icpScore": 5}')

        scores = await evaluator.score(LONG_BIO)

        assert scores.angel_score == 1.0
        assert scores.icp_score == 5
        assert scores.final_score == 3.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            '{"angelScore": 3.3, "icpScore": 9.9}',
            '{"angelScore": 100, "icpScore": 100}',
            '{"angelScore": -100, "icpScore": "7"}',
            "{}",
        ],
    )
    async def test_scores_always_bounded_and_final_is_mean(self, reply):
        evaluator = make_evaluator(reply)

        scores = await evaluator.score(LONG_BIO)

        assert 0 <= scores.angel_score <= 10
        assert 0 <= scores.icp_score <= 10
        assert scores.final_score == (scores.angel_score + scores.icp_score) / 2
