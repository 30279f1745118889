"""
API Routes — The endpoints that tie everything together.

ENDPOINTS:
- POST /api/verify    → text + source label → claims with verdicts + summary
- POST /api/ask       → question → sourced answer + confidence label
- POST /api/search    → query → answer + numeric trust score + warnings
- GET  /api/rankings  → per-source reliability rankings
- POST /api/rankings  → record explicit verdict counts for a source
- POST /api/rephrase  → text → same facts, new wording

FLOW:
1. Normalize and validate the input (ValidationError → 400)
2. Check the backend is configured (ConfigurationError → 500)
3. Hand off to the service; services absorb backend/parse failures

All errors leave as {"error": "..."} (handlers in main.py).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from trustie.api.dependencies import get_backend, get_rankings_store
from trustie.errors import BackendError, ConfigurationError, ValidationError
from trustie.models.schemas import (
    AskRequest,
    AskResponse,
    RankingsResponse,
    RecordRankingRequest,
    RephraseRequest,
    RephraseResponse,
    SearchRequest,
    SearchResponse,
    SuccessResponse,
    VerifyRequest,
    VerifyResponse,
)
from trustie.services.answerer import QuestionAnswerer
from trustie.services.backend import ReasoningBackend
from trustie.services.normalizer import normalize_text
from trustie.services.pipeline import VerificationPipeline
from trustie.services.rankings import RankingsStore
from trustie.services.rephraser import Rephraser
from trustie.services.trust.query_scorer import QueryTrustScorer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

VERIFY_MIN_CHARS = 20
VERIFY_MAX_CHARS = 15000
ASK_MIN_CHARS = 5
ASK_MAX_CHARS = 1000
SEARCH_MAX_CHARS = 1000

REPHRASE_FAILED = "Could not rephrase the text. Please try again."


def ensure_configured(backend: ReasoningBackend) -> None:
    """Raise ConfigurationError if the backend has no credentials."""
    if not backend.is_configured:
        raise ConfigurationError("API key not configured")


# =============================================================================
# VERIFY
# =============================================================================

@router.post("/verify", response_model=VerifyResponse, response_model_exclude_none=True)
async def verify(
    request: VerifyRequest,
    backend: ReasoningBackend = Depends(get_backend),
    store: RankingsStore = Depends(get_rankings_store),
) -> VerifyResponse:
    """
    Verify AI-generated text claim by claim.

    Example:
        POST /api/verify
        {"content": "The Great Wall of China is visible from space.", "sourceLabel": "ChatGPT"}

        Returns {"claims": [...], "summary": {...}, "summaryText": "..."}
    """
    content = normalize_text(request.content)
    if not content:
        raise ValidationError("Please paste some text to verify.", field="content")
    if len(content) < VERIFY_MIN_CHARS:
        raise ValidationError("Please paste at least 20 characters of text to verify.", field="content")
    if len(content) > VERIFY_MAX_CHARS:
        raise ValidationError("Text is too long. Please limit it to 15,000 characters.", field="content")

    source_label = request.source_label.strip()
    if not source_label:
        raise ValidationError("Please select which AI generated this text.", field="sourceLabel")

    ensure_configured(backend)

    pipeline = VerificationPipeline(backend, store)
    return await pipeline.run(content, source_label)


# =============================================================================
# ASK & SEARCH
# =============================================================================

@router.post("/ask", response_model=AskResponse)
async def ask(
    request: AskRequest,
    backend: ReasoningBackend = Depends(get_backend),
) -> AskResponse:
    """
    Answer a question with sources and a confidence label.

    Example:
        POST /api/ask
        {"question": "Who wrote Middlemarch?"}
    """
    question = normalize_text(request.question)
    if not question:
        raise ValidationError("Please enter a question.", field="question")
    if len(question) < ASK_MIN_CHARS:
        raise ValidationError("Please enter a longer question.", field="question")
    if len(question) > ASK_MAX_CHARS:
        raise ValidationError("Question is too long. Please make it shorter.", field="question")

    ensure_configured(backend)

    logger.info(f"Processing question: '{question[:80]}'")
    return await QuestionAnswerer(backend).answer(question)


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    backend: ReasoningBackend = Depends(get_backend),
) -> SearchResponse:
    """
    Answer a query and score how far the answer can be trusted.

    Example:
        POST /api/search
        {"query": "How tall is Mount Everest?"}

        Returns {"query": ..., "answer": ..., "trustScore": 85, "sources": [...], ...}
    """
    query = normalize_text(request.query)
    if not query:
        raise ValidationError("No search query provided", field="query")
    if len(query) > SEARCH_MAX_CHARS:
        raise ValidationError("Search query is too long. Please make it shorter.", field="query")

    ensure_configured(backend)

    logger.info(f"Processing search: '{query[:80]}'")
    result = await QueryTrustScorer(backend).score(query)
    return SearchResponse(
        query=result.query,
        answer=result.answer,
        trust_score=result.trust_score,
        sources=result.evidence,
        source_agreement=result.agreement_count,
        warnings=result.warnings,
    )


# =============================================================================
# RANKINGS
# =============================================================================

@router.get("/rankings", response_model=RankingsResponse)
async def list_rankings(
    store: RankingsStore = Depends(get_rankings_store),
) -> RankingsResponse:
    """
    Reliability rankings of every source with factual claims, best first.

    Example:
        GET /api/rankings
        Returns {"rankings": [{"name": "ChatGPT", "checksCount": 4, "score": 70, ...}]}
    """
    return RankingsResponse(rankings=store.list())


@router.post("/rankings", response_model=SuccessResponse)
async def record_ranking(
    request: RecordRankingRequest,
    store: RankingsStore = Depends(get_rankings_store),
) -> SuccessResponse:
    """
    Record one check with explicit counts.

    Example:
        POST /api/rankings
        {"sourceLabel": "Gemini", "counts": {"supported": 3, "contradicted": 1, "unverified": 0, "opinions": 2}}
    """
    source_label = request.source_label.strip()
    if not source_label:
        raise ValidationError("Source label required", field="sourceLabel")

    store.record_counts(source_label, request.counts)
    return SuccessResponse()


# =============================================================================
# REPHRASE
# =============================================================================

@router.post("/rephrase", response_model=RephraseResponse)
async def rephrase(
    request: RephraseRequest,
    backend: ReasoningBackend = Depends(get_backend),
) -> RephraseResponse:
    """
    Reword text while keeping every fact.

    Example:
        POST /api/rephrase
        {"text": "Water boils at 100 C at sea level."}
    """
    text = normalize_text(request.text)
    if not text:
        raise ValidationError("No text provided", field="text")

    ensure_configured(backend)

    try:
        rephrased = await Rephraser(backend).rephrase(text)
    except BackendError as e:
        logger.warning(f"Rephrase failed: {e.reason}")
        raise HTTPException(status_code=502, detail=REPHRASE_FAILED)
    return RephraseResponse(rephrased=rephrased)
