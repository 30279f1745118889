"""
Evidence Retriever Service.

WHAT THIS DOES:
Finds sources for a claim (or answers a question with sources) using the
backend's web search, then tags every source with a trust tier.

HOW IT WORKS:
1. One web-search-enabled backend call per claim/question
2. Parse the first JSON array (claims) or object (questions) in the reply
3. Clean each source: drop junk, derive a missing domain from the URL
4. Tag with the Trust-Tier Classifier, sort high → medium → low, cap

FAILURE POLICY:
Zero results, a failed call, a timeout or malformed output all yield an
empty evidence list. The claim then degrades to "unverified".

USAGE:
    retriever = EvidenceRetriever(backend)
    evidence = await retriever.retrieve("Great Wall of China length")
    answer = await retriever.retrieve_answer("How long is the Great Wall?")
"""

import logging
from dataclasses import dataclass, field

from trustie.config import get_settings
from trustie.errors import BackendError, ParseError
from trustie.models.schemas import MAX_EVIDENCE_PER_CLAIM, Evidence
from trustie.services.backend import ReasoningBackend
from trustie.services.normalizer import formalize
from trustie.services.parsing import coerce_count, extract_json_array, extract_json_object
from trustie.services.trust.trust_tiers import classify_domain, extract_domain, sort_by_trust

logger = logging.getLogger(__name__)

MIN_EVIDENCE_PER_CLAIM = 2

EVIDENCE_PROMPT = """Search for: "{query}"

Find {count} credible sources that address this statement. Prioritize .gov, .edu, peer-reviewed journals, encyclopedias and established news organizations.

Return ONLY a JSON array:
[{{"url": "full url", "title": "page title", "snippet": "relevant quote that addresses the claim", "domain": "domain name"}}]

If you find nothing relevant, return: []"""

ANSWER_PROMPT = """Search for accurate, factual information about: "{query}"

INSTRUCTIONS:
1. Search multiple sources to find the most accurate answer
2. Prioritize .edu, .gov, and peer-reviewed sources
3. Note how many sources agree with each other
4. Be factual and clear

After searching, respond with ONLY this JSON:
{{
  "answer": "Your answer based on sources. Use professional language (no contractions). Be clear and helpful.",
  "sources": [
    {{"url": "URL", "title": "Title", "snippet": "Relevant quote", "domain": "domain.com"}}
  ],
  "agreementCount": number of sources that agree with the answer
}}

Return ONLY valid JSON."""

NO_ANSWER = "Unable to process search. Please try again."


@dataclass
class RetrievedAnswer:
    """An answer to a free-text question, with its tagged evidence."""
    answer: str
    evidence: list[Evidence] = field(default_factory=list)
    agreement_count: int = 0


def to_evidence(raw: object) -> Evidence | None:
    """
    Convert one raw source dict from the backend into Evidence.

    Returns None for non-dicts and for items with neither url nor title.
    """
    if not isinstance(raw, dict):
        return None
    url = str(raw.get("url") or raw.get("link") or "").strip()
    title = str(raw.get("title") or "").strip()
    if not url and not title:
        return None

    domain = str(raw.get("domain") or "").strip().lower()
    if domain.startswith("www."):
        domain = domain[4:]
    if not domain:
        domain = extract_domain(url) or "unknown"

    return Evidence(
        url=url or "#",
        title=title or "Source",
        snippet=str(raw.get("snippet") or raw.get("content") or "").strip(),
        domain=domain,
        trust_tier=classify_domain(domain if domain != "unknown" else url),
    )


def to_evidence_list(items: list, limit: int) -> list[Evidence]:
    """Tag, sort high-tier first and cap a list of raw sources."""
    evidence = [e for e in (to_evidence(item) for item in items) if e is not None]
    return sort_by_trust(evidence)[:limit]


class EvidenceRetriever:
    """
    Retrieves and ranks evidence via the backend's web search.

    Pipeline position:
    Claim → [EvidenceRetriever] → Evidence[] → ClaimAdjudicator → ...
    Question → [EvidenceRetriever.retrieve_answer] → QueryTrustScorer
    """

    def __init__(self, backend: ReasoningBackend, max_results: int | None = None):
        settings = get_settings()
        self.backend = backend
        requested = max_results or settings.evidence_per_claim
        self.max_results = max(MIN_EVIDENCE_PER_CLAIM, min(requested, MAX_EVIDENCE_PER_CLAIM))

    async def retrieve(self, query: str) -> list[Evidence]:
        """
        Retrieve evidence for one claim.

        Args:
            query: The claim text or its suggested search query

        Returns:
            Up to `max_results` Evidence items, high-tier first ([] on failure)
        """
        prompt = EVIDENCE_PROMPT.format(query=query, count=f"{MIN_EVIDENCE_PER_CLAIM}-{self.max_results}")
        result = await self.backend.submit(prompt, web_search=True, max_tokens=1500)
        try:
            items = extract_json_array(result.unwrap())
        except BackendError as e:
            logger.warning(f"Evidence search failed for '{query[:60]}': {e.reason}")
            return []
        except ParseError as e:
            logger.warning(f"Could not parse evidence for '{query[:60]}': {e}")
            return []

        evidence = to_evidence_list(items, self.max_results)
        logger.info(f"Retrieved {len(evidence)} sources for '{query[:60]}'")
        return evidence

    async def retrieve_answer(self, question: str) -> RetrievedAnswer:
        """
        Answer a free-text question with sources.

        Missing agreementCount defaults to the number of sources.
        If the reply has no JSON, the raw text is used as the answer.
        """
        result = await self.backend.submit(ANSWER_PROMPT.format(query=question), web_search=True, max_tokens=2000)
        if not result.ok:
            logger.warning(f"Answer search failed for '{question[:60]}': {result.reason}")
            return RetrievedAnswer(answer=NO_ANSWER)

        try:
            parsed = extract_json_object(result.text)
        except ParseError as e:
            logger.warning(f"Could not parse answer for '{question[:60]}': {e}")
            return RetrievedAnswer(answer=formalize(result.text.strip()) or NO_ANSWER)

        sources = parsed.get("sources")
        evidence = to_evidence_list(sources if isinstance(sources, list) else [], MAX_EVIDENCE_PER_CLAIM)
        answer = str(parsed.get("answer") or "").strip() or "Unable to find a clear answer."

        return RetrievedAnswer(
            answer=formalize(answer),
            evidence=evidence,
            agreement_count=coerce_count(parsed.get("agreementCount"), default=len(evidence)),
        )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def retrieve_evidence(query: str, backend: ReasoningBackend) -> list[Evidence]:
    """
    Convenience function to retrieve evidence for one claim.
    """
    retriever = EvidenceRetriever(backend)
    return await retriever.retrieve(query)
