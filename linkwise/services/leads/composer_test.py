import pytest
from unittest.mock import AsyncMock, MagicMock

from linkwise.services.leads.composer import (
    COMPOSER_SYSTEM_PROMPT,
    MAX_NOTE_LENGTH,
    OutreachComposer,
    fallback_note,
)
from linkwise.services.leads.exceptions import EvaluationError


def make_composer(reply=None, side_effect=None) -> OutreachComposer:
    llm = MagicMock()
    llm.complete = AsyncMock(return_value=reply, side_effect=side_effect)
    return OutreachComposer(llm)


@pytest.mark.unit
class TestOutreachComposer:
    @pytest.mark.asyncio
    async def test_returns_trimmed_reply(self):
        composer = make_composer("  Hi Ana, loved your work on climate fintech!  \n")

        message = await composer.compose("Climate fintech founder", "Ana Silva", 8)

        assert message == "Hi Ana, loved your work on climate fintech!"
        args, kwargs = composer.llm.complete.call_args
        assert args[0] == COMPOSER_SYSTEM_PROMPT
        assert args[1] == "Name: Ana Silva, Bio: Climate fintech founder, AngelScore: 8"
        assert kwargs["temperature"] == 0.5

    @pytest.mark.asyncio
    async def test_long_reply_is_truncated(self):
        composer = make_composer("a" * 450)

        message = await composer.compose("bio", "Ana", 9)

        assert len(message) == MAX_NOTE_LENGTH

    @pytest.mark.asyncio
    async def test_failure_returns_fallback_with_name_only(self):
        composer = make_composer(side_effect=EvaluationError("connection_note request failed"))

        message = await composer.compose("secret bio details", "Ana Silva", 9)

        assert message == fallback_note("Ana Silva")
        assert "Ana Silva" in message
        assert "secret bio details" not in message

    @pytest.mark.asyncio
    async def test_empty_reply_returns_fallback(self):
        composer = make_composer("   ")

        message = await composer.compose("bio", "Ana", 9)

        assert message == fallback_note("Ana")

    def test_fallback_is_bounded(self):
        assert len(fallback_note("x" * 400)) <= MAX_NOTE_LENGTH
