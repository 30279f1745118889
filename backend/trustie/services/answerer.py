"""
Question Answerer — sourced answers for /api/ask.

WHAT THIS DOES:
Answers a free-text question with one web-search backend call and returns
the answer, its sources, and a coarse confidence label (high/medium/low).

Unlike /api/search, there is no numeric trust score: the confidence label
comes from the backend and is then adjusted by how many sources it cited:
- no sources          → low
- 3+ sources + medium → high

FALLBACKS:
- Backend failure              → fixed "could not find" answer, low, no sources
- Reply without usable JSON    → the first 500 chars of the raw reply, low
- Answer of 10 chars or fewer  → fixed "could not find" answer

USAGE:
    answerer = QuestionAnswerer(backend)
    response = await answerer.answer("Who wrote Middlemarch?")
"""

import logging

from trustie.errors import ParseError
from trustie.models.schemas import MAX_EVIDENCE_PER_CLAIM, AskResponse, ConfidenceLabel
from trustie.services.backend import ReasoningBackend
from trustie.services.normalizer import formalize
from trustie.services.parsing import extract_json_object
from trustie.services.trust.evidence_retriever import to_evidence

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "I could not find a reliable answer to your question."
MIN_ANSWER_CHARS = 10
MIN_RAW_REPLY_CHARS = 50
RAW_REPLY_PREVIEW_CHARS = 500

CONFIDENCE_LABELS: set[str] = {"high", "medium", "low"}

ASK_SYSTEM = "You are Trustie, an AI assistant that ONLY provides answers backed by verifiable sources."

ASK_PROMPT = """USER QUESTION: "{question}"

INSTRUCTIONS:
1. Search the web to find the answer to this question
2. Use authoritative sources: encyclopedias, news sites, government sites, educational institutions, official company sites
3. Provide a clear, direct answer based on what you find
4. Include ALL sources you used to form your answer
5. Be honest if you cannot find reliable information

IMPORTANT RULES:
- NEVER make up information. Only state what you can verify from sources.
- If you are unsure, say so clearly
- Keep the answer concise but complete (2-4 sentences for simple questions, more for complex ones)
- Use professional language with no contractions

Respond with ONLY this JSON format:
{{
  "answer": "Your clear, direct answer based on sources",
  "confidence": "high|medium|low",
  "sources": [
    {{"url": "actual URL", "title": "page title", "snippet": "relevant quote", "domain": "domain.com"}}
  ]
}}

CONFIDENCE LEVELS:
- "high" = Multiple authoritative sources agree
- "medium" = Some sources found but not definitive
- "low" = Limited or conflicting information

You MUST include at least 1 source. Return ONLY valid JSON."""


def raw_reply_preview(text: str) -> str:
    """First 500 chars of a reply, with "..." when truncated."""
    preview = text[:RAW_REPLY_PREVIEW_CHARS]
    return preview + "..." if len(text) > RAW_REPLY_PREVIEW_CHARS else preview


def adjust_confidence(confidence: ConfidenceLabel, source_count: int) -> ConfidenceLabel:
    """Reconcile the backend's confidence label with the number of sources."""
    if source_count == 0:
        return "low"
    if source_count >= 3 and confidence == "medium":
        return "high"
    return confidence


def parse_answer(reply: str) -> AskResponse:
    """
    Build an AskResponse from a backend reply.

    Never raises: an unparseable reply falls back to its raw text.
    """
    answer = FALLBACK_ANSWER
    confidence: ConfidenceLabel = "low"
    sources = []

    try:
        parsed = extract_json_object(reply)
    except ParseError as e:
        logger.warning(f"Could not parse answer JSON: {e}")
        if len(reply) > MIN_RAW_REPLY_CHARS:
            answer = raw_reply_preview(reply)
        parsed = {}

    candidate = str(parsed.get("answer") or "").strip()
    if len(candidate) > MIN_ANSWER_CHARS:
        answer = candidate

    label = str(parsed.get("confidence") or "").strip().lower()
    if label in CONFIDENCE_LABELS:
        confidence = label

    raw_sources = parsed.get("sources")
    if isinstance(raw_sources, list):
        evidence = (to_evidence(item) for item in raw_sources)
        sources = [e for e in evidence if e is not None][:MAX_EVIDENCE_PER_CLAIM]

    return AskResponse(
        answer=formalize(answer),
        sources=sources,
        confidence=adjust_confidence(confidence, len(sources)),
    )


class QuestionAnswerer:
    """
    Answers open questions with sources and a confidence label.

    Pipeline position:
    Question → Normalizer → [QuestionAnswerer] → AskResponse
    """

    def __init__(self, backend: ReasoningBackend):
        self.backend = backend

    async def answer(self, question: str) -> AskResponse:
        """
        Answer a (normalized) question.

        Returns:
            AskResponse; backend failures give the fallback answer
        """
        result = await self.backend.submit(
            ASK_PROMPT.format(question=question),
            system=ASK_SYSTEM,
            web_search=True,
            max_tokens=3000,
        )
        if not result.ok:
            logger.warning(f"Ask call failed for '{question[:60]}': {result.reason}")
            return AskResponse(answer=FALLBACK_ANSWER, sources=[], confidence="low")

        response = parse_answer(result.text)
        logger.info(
            f"Answered '{question[:60]}' with {len(response.sources)} sources "
            f"({response.confidence} confidence)"
        )
        return response


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def answer_question(question: str, backend: ReasoningBackend) -> AskResponse:
    """
    Convenience function to answer one question.
    """
    answerer = QuestionAnswerer(backend)
    return await answerer.answer(question)
