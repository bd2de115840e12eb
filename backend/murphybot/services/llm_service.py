"""
LLM Service
===========
Groq-backed generative fallback used when no FAQ or SOP answers a question.

`answer()` never raises: any failure (missing key, network, quota,
malformed response) is logged and replaced by a fixed apology so the chat
transport always has something to send.
"""

import logging
from typing import Optional

from groq import AsyncGroq

from murphybot.config import Settings

logger = logging.getLogger(__name__)

EMPTY_OUTPUT_TEXT = "(No text output)"


def build_system_prompt(signature: str) -> str:
    """Fixed system instruction: persona, team standards, link policy, signature"""
    return f"""You are MurphyGPT for The Murphy Group, the internal assistant for our real estate agents and staff.

Enforce the team standards whenever they are relevant:
- Speed-to-lead: respond to every new lead in 5 minutes or less.
- 7 attempts in 7 days for every new lead.
- Monthly touches with every past client.

Rules:
1. Be concise and action-oriented. Prefer short steps or bullet points.
2. You did not find this answer in the team FAQ or SOP library. If the question is about an internal policy, say so and suggest asking the team lead or typing "sop: <topic>" / "faq: <question>".
3. NEVER invent links, URLs, phone numbers, or document names.
4. Do not give legal, tax, or lending advice; point the agent to the appropriate professional.
5. End every answer with "{signature}"."""


class LLMService:
    """
    Generative fallback adapter around the Groq chat completions API.

    Args:
        settings: Application settings (model, key, limits, signature)
        client: Optional pre-built client, mainly for tests
    """

    def __init__(self, settings: Settings, client: Optional[AsyncGroq] = None):
        self.settings = settings
        self._client = client
        self.system_prompt = build_system_prompt(settings.brand_signature)
        self.error_text = f"I hit an issue reaching the assistant service. Please try again shortly. {settings.brand_signature}"

    @property
    def client(self) -> AsyncGroq:
        """Get async Groq client"""
        if self._client is None:
            self._client = AsyncGroq(api_key=self.settings.groq_api_key)
        return self._client

    async def answer(self, text: str) -> str:
        """
        Generate a fallback answer.

        Args:
            text: Cleaned user text ("Help" when empty)

        Returns:
            Generated text, or the fixed apology on any failure
        """
        if not self.settings.groq_api_key and self._client is None:
            logger.error("GROQ_API_KEY is not set; returning fallback apology")
            return self.error_text

        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": text.strip() or "Help"},
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.settings.llm_model,
                messages=messages,
                max_tokens=self.settings.llm_max_tokens,
                temperature=self.settings.llm_temperature,
            )
            content = response.choices[0].message.content
        except Exception as e:
            logger.error(f"❌ Groq error: {e}")
            return self.error_text

        if not content or not content.strip():
            return EMPTY_OUTPUT_TEXT

        return content.strip()
