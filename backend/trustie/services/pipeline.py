"""
Verification Pipeline — Orchestrates the full verify flow.

WHAT THIS DOES:
Turns a block of AI-generated text into a list of claims with verdicts,
a summary, and an update to the source's rankings.

WHY THIS EXISTS:
- Keeps API routes thin and focused on HTTP concerns
- Makes the pipeline testable with a scripted backend
- Single place to understand the full flow

PIPELINE STAGES:
1. Normalize the text
2. Misconception pre-scan, sentence by sentence (no network)
3. Extract typed claims (one backend call per chunk)
4. Per claim, in extraction order:
   - known misconception → "contradicted" with the stored correction
   - opinion/prediction → status "opinion", no evidence
   - otherwise → retrieve evidence → adjudicate
5. Append misconceptions found in step 2 that no claim covered
6. Summarize and record the fact-typed verdicts in the rankings

The pre-scan guarantees a famous myth is reported as contradicted even
when extraction fails or the backend is unreachable.

USAGE:
    pipeline = VerificationPipeline(backend, store)
    response = await pipeline.run(
        content="The Great Wall of China is visible from space.",
        source_label="ChatGPT",
    )
"""

import asyncio
import logging

from trustie.config import get_settings
from trustie.models.schemas import (
    MAX_CLAIMS_PER_TEXT,
    Claim,
    VerificationSummary,
    VerifyResponse,
)
from trustie.services.backend import ReasoningBackend
from trustie.services.normalizer import normalize_text
from trustie.services.rankings import RankingsStore
from trustie.services.trust.claim_adjudicator import ClaimAdjudicator
from trustie.services.trust.claim_extractor import ClaimExtractor, ExtractedClaim, split_sentences
from trustie.services.trust.evidence_retriever import EvidenceRetriever
from trustie.services.trust.misconceptions import (
    MisconceptionMatch,
    MisconceptionTable,
    get_misconception_table,
)

logger = logging.getLogger(__name__)

NO_CLAIMS_MESSAGE = (
    "No factual claims found to verify. "
    "The text may contain only opinions or general statements."
)
OPINION_EXPLANATION = "This is an opinion or subjective statement that cannot be fact-checked."
PREDICTION_EXPLANATION = "This is a prediction about the future that cannot be verified yet."


def misconception_claim(text: str, hit: MisconceptionMatch) -> Claim:
    """A claim settled by the misconception table."""
    return Claim(
        text=text,
        type="fact",
        status="contradicted",
        explanation=hit.correction,
        evidence=[],
        agreement_count=0,
    )


def summarize(claims: list[Claim]) -> VerificationSummary:
    """Verdict counts over all claims of one run."""
    return VerificationSummary(
        total=len(claims),
        supported=sum(1 for c in claims if c.status == "supported"),
        contradicted=sum(1 for c in claims if c.status == "contradicted"),
        unverified=sum(1 for c in claims if c.status == "unverified"),
        opinions=sum(1 for c in claims if c.status == "opinion"),
    )


def summary_text(summary: VerificationSummary) -> str:
    """One-line human-readable summary."""
    noun = "claim" if summary.total == 1 else "claims"
    return (
        f"Checked {summary.total} {noun}: {summary.supported} supported, "
        f"{summary.contradicted} contradicted, {summary.unverified} unverified, "
        f"{summary.opinions} opinions or predictions."
    )


class VerificationPipeline:
    """
    Orchestrates verification from raw text to VerifyResponse.

    This class coordinates:
    1. MisconceptionTable (deterministic short-circuit)
    2. ClaimExtractor
    3. EvidenceRetriever + ClaimAdjudicator per claim
    4. RankingsStore update
    """

    def __init__(
        self,
        backend: ReasoningBackend,
        store: RankingsStore | None = None,
        misconceptions: MisconceptionTable | None = None,
        claim_concurrency: int | None = None,
    ):
        """
        Args:
            backend: Reasoning backend shared by all stages
            store: Rankings store to record results in (None = don't record)
            misconceptions: Misconception table (configured table if None)
            claim_concurrency: Claims processed at once (1 = sequential)
        """
        settings = get_settings()
        self.backend = backend
        self.store = store
        self.misconceptions = misconceptions if misconceptions is not None else get_misconception_table()
        self.claim_concurrency = max(1, claim_concurrency or settings.claim_concurrency)

        self.extractor = ClaimExtractor(backend)
        self.retriever = EvidenceRetriever(backend)
        self.adjudicator = ClaimAdjudicator(backend)

    async def run(self, content: str, source_label: str) -> VerifyResponse:
        """
        Verify `content` and record the outcome under `source_label`.

        Args:
            content: Raw text (normalized here)
            source_label: Which AI produced the text

        Returns:
            VerifyResponse with claims in extraction order
        """
        text = normalize_text(content)
        logger.info(f"Verifying {len(text)} chars from '{source_label}'")

        # Stage 1: misconceptions visible in the raw sentences
        prescan = self._prescan(text)

        # Stage 2: extraction
        extracted = await self.extractor.extract(text)

        # Stage 3: per-claim verdicts, bounded concurrency, extraction order kept
        semaphore = asyncio.Semaphore(self.claim_concurrency)

        async def bounded(claim: ExtractedClaim) -> tuple[Claim, str | None]:
            async with semaphore:
                return await self._process(claim)

        results = await asyncio.gather(*(bounded(c) for c in extracted))
        claims = [claim for claim, _ in results]
        covered = {myth_id for _, myth_id in results if myth_id}

        # Stage 4: myths the extractor missed
        for sentence, hit in prescan:
            if hit.id in covered:
                continue
            covered.add(hit.id)
            logger.info(f"Adding misconception '{hit.id}' missed by extraction")
            claims.append(misconception_claim(sentence, hit))

        claims = claims[:MAX_CLAIMS_PER_TEXT]

        if not claims:
            logger.info("No claims found")
            return VerifyResponse(claims=[], summary=VerificationSummary(), message=NO_CLAIMS_MESSAGE)

        summary = summarize(claims)
        if self.store is not None:
            self.store.record(source_label, claims)

        logger.info(
            f"Verified {summary.total} claims: {summary.supported} supported, "
            f"{summary.contradicted} contradicted, {summary.unverified} unverified, "
            f"{summary.opinions} opinions"
        )
        return VerifyResponse(claims=claims, summary=summary, summary_text=summary_text(summary))

    def _prescan(self, text: str) -> list[tuple[str, MisconceptionMatch]]:
        """Misconception hits per sentence, first sentence per id."""
        hits = []
        seen: set[str] = set()
        for sentence in split_sentences(text):
            hit = self.misconceptions.match(sentence)
            if hit and hit.id not in seen:
                seen.add(hit.id)
                hits.append((sentence, hit))
        return hits

    async def _process(self, extracted: ExtractedClaim) -> tuple[Claim, str | None]:
        """
        Verdict for one claim.

        Returns the claim and the id of the misconception it matched, if any.
        """
        hit = self.misconceptions.match(extracted.text)
        if hit:
            return misconception_claim(extracted.text, hit), hit.id

        if extracted.type == "opinion":
            return Claim(
                text=extracted.text, type="opinion", status="opinion",
                explanation=OPINION_EXPLANATION,
            ), None
        if extracted.type == "prediction":
            return Claim(
                text=extracted.text, type="prediction", status="opinion",
                explanation=PREDICTION_EXPLANATION,
            ), None

        evidence = await self.retriever.retrieve(extracted.query)
        verdict = await self.adjudicator.adjudicate(extracted.text, evidence)
        return Claim(
            text=extracted.text,
            type="fact",
            status=verdict.status,
            explanation=verdict.explanation,
            evidence=evidence,
            agreement_count=verdict.agreement_count,
        ), None


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def run_verification(
    content: str,
    source_label: str,
    backend: ReasoningBackend,
    store: RankingsStore | None = None,
) -> VerifyResponse:
    """
    Convenience function to run the verification pipeline.
    """
    pipeline = VerificationPipeline(backend, store)
    return await pipeline.run(content, source_label)
