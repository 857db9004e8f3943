"""
FAQ Service

Wires search and synthesis into a single query -> FAQResult operation.
"""

from __future__ import annotations

import logging

from .models import FAQResult
from .orchestrator import SearchOrchestrator
from .synthesizer import AnswerSynthesizer

logger = logging.getLogger("mediphant.faq")


class FAQService:
    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        synthesizer: AnswerSynthesizer,
    ) -> None:
        self.orchestrator = orchestrator
        self.synthesizer = synthesizer

    async def answer(self, query: str) -> FAQResult:
        """Search for `query` and synthesize an answer from the matches."""
        matches = await self.orchestrator.search(query)
        answer = await self.synthesizer.synthesize(query, matches)

        logger.debug(
            "FAQ answered: mode=%s matches=%d",
            self.orchestrator.mode.value,
            len(matches),
        )
        return FAQResult(answer=answer, matches=matches)
