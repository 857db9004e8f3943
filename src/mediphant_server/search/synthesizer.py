"""
Answer Synthesizer

Turns retrieved passages into the final answer text. Generative synthesis is
attempted only when there are at least two passages to combine; any failure
there falls back to a deterministic answer, so synthesis never raises.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .models import SearchMatch
from ..core.errors import UpstreamServiceError
from ..llm.client import LLMClient

logger = logging.getLogger("mediphant.synthesizer")

NO_INFORMATION_ANSWER = (
    "I don't have specific information about that topic. "
    "Please consult with a healthcare professional for medical guidance."
)

CONSULT_SUFFIX = "For additional guidance, consult with a healthcare professional."

PROMPT_TEMPLATE = """Based on the following medical information, provide a concise answer to the question: "{query}"

Context:
{context}

Please provide a helpful, accurate response. If the context doesn't contain enough information, say so and recommend consulting a healthcare professional."""


class AnswerSynthesizer:
    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        max_tokens: int = 200,
        temperature: float = 0.3,
    ) -> None:
        self._llm = llm
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def generative(self) -> bool:
        return self._llm is not None

    async def synthesize(self, query: str, matches: Sequence[SearchMatch]) -> str:
        if not matches:
            return NO_INFORMATION_ANSWER

        if len(matches) == 1:
            return matches[0].text

        if self._llm is not None:
            try:
                return await self._generate(query, matches)
            except UpstreamServiceError as exc:
                logger.warning("Generative synthesis failed (%s), using top match", type(exc).__name__)
            except Exception:
                logger.exception("Unexpected failure in generative synthesis")

        return compose_fallback_answer(matches)

    async def _generate(self, query: str, matches: Sequence[SearchMatch]) -> str:
        context = "\n\n".join(m.text for m in matches)
        prompt = PROMPT_TEMPLATE.format(query=query, context=context)
        return await self._llm.chat(
            [{"role": "user", "content": prompt}],
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )


def compose_fallback_answer(matches: Sequence[SearchMatch]) -> str:
    """Top match text followed by the consultation suffix."""
    return f"{matches[0].text} {CONSULT_SUFFIX}"
