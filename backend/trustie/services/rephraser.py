"""
Rephraser — rewrites an answer in new words, keeping every fact.

Used by the client to get a fresh wording of a verified answer.
The output is passed through formalize() so it stays in a formal register.

USAGE:
    rephraser = Rephraser(backend)
    text = await rephraser.rephrase("Water boils at 100 C at sea level.")
"""

import logging

from trustie.errors import BackendError
from trustie.services.backend import ReasoningBackend
from trustie.services.normalizer import formalize

logger = logging.getLogger(__name__)

REPHRASE_PROMPT = """Rewrite this text in different words while keeping ALL the same facts. Make it sound natural and original, like a person wrote it fresh. Do NOT change any facts, numbers, dates, or claims - only the wording.

TEXT TO REWRITE:
"{text}"

RULES:
1. Keep ALL facts exactly the same
2. Change the sentence structure and word choices
3. Make it sound natural, not robotic
4. Use professional language (no contractions)
5. Keep approximately the same length

Return ONLY the rewritten text, nothing else."""


class Rephraser:
    """Rewrites text with identical facts."""

    def __init__(self, backend: ReasoningBackend):
        self.backend = backend

    async def rephrase(self, text: str) -> str:
        """
        Rephrase `text`.

        Raises:
            BackendError: if the call fails or the reply is empty
        """
        result = await self.backend.submit(REPHRASE_PROMPT.format(text=text), max_tokens=1000)
        rephrased = formalize(result.unwrap().strip())
        if not rephrased:
            raise BackendError("empty rephrasing")
        logger.info(f"Rephrased {len(text)} chars into {len(rephrased)} chars")
        return rephrased


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def rephrase_text(text: str, backend: ReasoningBackend) -> str:
    """
    Convenience function to rephrase text.
    """
    return await Rephraser(backend).rephrase(text)
