"""
Query Trust Scorer.

WHAT THIS DOES:
Gives an answer to an open question a numeric trust score (0-100) and a
list of advisory warnings, based only on the evidence behind it.

WHY THIS MATTERS:
The answer text itself says nothing about how well it is sourced.
Two government sources that agree deserve more trust than one blog post,
whatever the wording of the answer.

FORMULA:
trust_score = base
            + high_weight   × (# high-tier sources)
            + medium_weight × (# medium-tier sources)
            + agreement bonus (strong if agreement ≥ 3, partial if ≥ 2)
            - no_credible_penalty (if there is no high or medium source)
clamped to [0, 100] and rounded.

EXAMPLE (default weights):
    Evidence: one high-tier + one low-tier source, agreementCount = 2
    trust_score = 50 + 15 + 0 + 10 = 75

WARNINGS:
- No high- or medium-trust source
- Fewer than 2 sources
- Hedging language in the answer ("may", "might", "possibly", ...)

USAGE:
    scorer = QueryTrustScorer(backend)
    result = await scorer.score("How tall is Mount Everest?")
    print(result.trust_score, result.warnings)
"""

import logging
import re
from dataclasses import dataclass

from trustie.config import Settings, get_settings
from trustie.models.schemas import MAX_EVIDENCE_PER_CLAIM, AnswerResult, Evidence
from trustie.services.backend import ReasoningBackend
from trustie.services.trust.evidence_retriever import EvidenceRetriever, RetrievedAnswer
from trustie.services.trust.trust_tiers import count_tiers, sort_by_trust

logger = logging.getLogger(__name__)

MIN_SOURCES_WITHOUT_WARNING = 2

NO_CREDIBLE_SOURCE_WARNING = (
    "No high-trust sources (.edu, .gov, peer-reviewed) or established news sources found. "
    "Consider verifying with additional sources."
)
LIMITED_SOURCES_WARNING = "Limited sources available. Cross-reference with additional searches."
HEDGING_WARNING = "This topic contains uncertainty. Multiple perspectives may exist."


@dataclass(frozen=True)
class TrustScoreWeights:
    """Constants of the trust score formula."""
    base: float = 50.0
    high_weight: float = 15.0
    medium_weight: float = 8.0
    strong_agreement_threshold: int = 3
    strong_agreement_bonus: float = 20.0
    partial_agreement_threshold: int = 2
    partial_agreement_bonus: float = 10.0
    no_credible_penalty: float = 20.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "TrustScoreWeights":
        return cls(
            base=settings.trust_base_score,
            high_weight=settings.trust_high_weight,
            medium_weight=settings.trust_medium_weight,
            strong_agreement_threshold=settings.trust_strong_agreement_threshold,
            strong_agreement_bonus=settings.trust_strong_agreement_bonus,
            partial_agreement_threshold=settings.trust_partial_agreement_threshold,
            partial_agreement_bonus=settings.trust_partial_agreement_bonus,
            no_credible_penalty=settings.trust_no_credible_penalty,
        )


def compute_trust_score(
    evidence: list[Evidence],
    agreement_count: int,
    weights: TrustScoreWeights | None = None,
) -> int:
    """
    Trust score for an answer, always within [0, 100].

    Args:
        evidence: Tier-tagged evidence behind the answer
        agreement_count: How many sources agree with the answer
        weights: Formula constants (defaults if None)
    """
    w = weights or TrustScoreWeights()
    tiers = count_tiers(evidence)

    score = w.base
    score += w.high_weight * tiers["high"]
    score += w.medium_weight * tiers["medium"]

    if agreement_count >= w.strong_agreement_threshold:
        score += w.strong_agreement_bonus
    elif agreement_count >= w.partial_agreement_threshold:
        score += w.partial_agreement_bonus

    if tiers["high"] == 0 and tiers["medium"] == 0:
        score -= w.no_credible_penalty

    return int(max(0.0, min(100.0, score)) + 0.5)


def find_hedging_terms(answer: str, hedging_terms: list[str]) -> list[str]:
    """Hedging terms present in `answer` as whole words (case-insensitive)."""
    found = []
    for term in hedging_terms:
        if re.search(rf"\b{re.escape(term)}\b", answer, re.IGNORECASE):
            found.append(term)
    return found


def generate_warnings(
    evidence: list[Evidence],
    answer: str,
    hedging_terms: list[str] | None = None,
) -> list[str]:
    """Advisory warnings about the sourcing and wording of an answer."""
    if hedging_terms is None:
        hedging_terms = get_settings().hedging_terms

    warnings = []
    tiers = count_tiers(evidence)
    if tiers["high"] == 0 and tiers["medium"] == 0:
        warnings.append(NO_CREDIBLE_SOURCE_WARNING)
    if len(evidence) < MIN_SOURCES_WITHOUT_WARNING:
        warnings.append(LIMITED_SOURCES_WARNING)
    if find_hedging_terms(answer, hedging_terms):
        warnings.append(HEDGING_WARNING)
    return warnings


class QueryTrustScorer:
    """
    Answers an open question and scores the answer.

    Pipeline position:
    Question → Normalizer → EvidenceRetriever (answer mode) → [QueryTrustScorer] → AnswerResult
    """

    def __init__(
        self,
        backend: ReasoningBackend,
        weights: TrustScoreWeights | None = None,
        hedging_terms: list[str] | None = None,
    ):
        settings = get_settings()
        self.retriever = EvidenceRetriever(backend)
        self.weights = weights or TrustScoreWeights.from_settings(settings)
        self.hedging_terms = hedging_terms if hedging_terms is not None else settings.hedging_terms

    async def score(self, query: str) -> AnswerResult:
        """Retrieve an answer with evidence for `query` and score it."""
        retrieved = await self.retriever.retrieve_answer(query)
        return self.score_answer(query, retrieved)

    def score_answer(self, query: str, retrieved: RetrievedAnswer) -> AnswerResult:
        """
        Assemble an AnswerResult from an already retrieved answer.

        Evidence is sorted high-tier first and capped at 5.
        """
        evidence = sort_by_trust(retrieved.evidence)[:MAX_EVIDENCE_PER_CLAIM]
        trust_score = compute_trust_score(evidence, retrieved.agreement_count, self.weights)
        warnings = generate_warnings(evidence, retrieved.answer, self.hedging_terms)

        logger.info(
            f"Scored answer for '{query[:60]}': trust={trust_score}, "
            f"{len(evidence)} sources, {len(warnings)} warnings"
        )
        return AnswerResult(
            query=query,
            answer=retrieved.answer,
            trust_score=trust_score,
            evidence=evidence,
            agreement_count=retrieved.agreement_count,
            warnings=warnings,
        )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def score_query(query: str, backend: ReasoningBackend) -> AnswerResult:
    """
    Convenience function to answer and score one question.
    """
    scorer = QueryTrustScorer(backend)
    return await scorer.score(query)
