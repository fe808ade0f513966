"""Thin wrapper over the OpenAI chat-completions API shared by scoring and message composition."""

import time
from typing import Optional

from openai import AsyncOpenAI

from linkwise.core.logging import log_completion_request
from linkwise.services.leads.exceptions import EvaluationError


class LLMClient:
    """Sends chat-completion requests and returns the reply text."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini", max_tokens: int = 100):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_api_key(cls, api_key: Optional[str], model: str = "gpt-4o-mini", max_tokens: int = 100) -> "LLMClient":
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required for the evaluation client")
        return cls(AsyncOpenAI(api_key=api_key), model=model, max_tokens=max_tokens)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        purpose: str = "completion",
    ) -> str:
        """
        Run one system+user completion.

        Returns:
            The reply content, possibly empty

        Raises:
            EvaluationError: When the request fails or the response has no choices
        """
        start = time.time()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            log_completion_request(
                self.model, purpose, duration=time.time() - start, error=str(e)
            )
            raise EvaluationError(f"{purpose} request failed: {e}") from e

        log_completion_request(self.model, purpose, duration=time.time() - start)

        if not response.choices:
            raise EvaluationError(f"{purpose} response contained no choices")
        return response.choices[0].message.content or ""
