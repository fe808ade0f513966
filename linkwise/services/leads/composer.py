from loguru import logger

from .llm import LLMClient

MAX_NOTE_LENGTH = 300

COMPOSER_SYSTEM_PROMPT = (
    "Generate a concise LinkedIn connection request (max 300 characters) for a "
    "startup founder using LinkWise (Superland). Personalize with name, bio, and "
    "angelScore (0-10). Highlight investment opportunities, keep tone "
    "enthusiastic yet respectful."
)

FALLBACK_NOTE_TEMPLATE = (
    "Hi {name}, I'm with LinkWise (Superland) and admire your expertise. "
    "Let's connect to explore investment opportunities!"
)


def fallback_note(name: str) -> str:
    return FALLBACK_NOTE_TEMPLATE.format(name=name)[:MAX_NOTE_LENGTH]


class OutreachComposer:
    """Writes the connection-request note. Never blocks outreach on failure."""

    def __init__(self, llm: LLMClient, temperature: float = 0.5, max_length: int = MAX_NOTE_LENGTH):
        self.llm = llm
        self.temperature = temperature
        self.max_length = max_length

    async def compose(self, bio: str, name: str, angel_score: float) -> str:
        try:
            reply = await self.llm.complete(
                COMPOSER_SYSTEM_PROMPT,
                f"Name: {name}, Bio: {bio}, AngelScore: {angel_score}",
                temperature=self.temperature,
                purpose="connection_note",
            )
        except Exception as e:
            logger.error(f"Failed to generate message for {name}: {e}")
            return fallback_note(name)[: self.max_length]

        message = reply.strip()[: self.max_length]
        if not message:
            logger.warning(f"Empty message generated for {name}, using fallback")
            return fallback_note(name)[: self.max_length]
        return message
