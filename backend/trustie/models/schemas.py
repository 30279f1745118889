"""
Pydantic schemas for API request/response validation.

These define the shape of data that goes in and out of the API.
Python attributes are snake_case; the JSON wire format is camelCase
(sourceLabel, trustScore, agreementCount, ...), handled by the alias generator.

FLOW OVERVIEW:
==============
1. Client sends VerifyRequest to /api/verify
2. Claims are extracted, checked against evidence → Claim[]
3. VerifyResponse carries the claims plus a VerificationSummary
4. The source's counts flow into the rankings → Ranking[]

The search path (/api/search) produces an AnswerResult instead.
"""

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TrustTier = Literal["high", "medium", "low"]
ClaimType = Literal["fact", "opinion", "prediction"]
ClaimStatus = Literal["supported", "contradicted", "unverified", "opinion"]
ConfidenceLabel = Literal["high", "medium", "low"]

# Hard limits shared by the whole pipeline
MAX_CLAIMS_PER_TEXT = 10
MAX_EVIDENCE_PER_CLAIM = 5


class ApiModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# EVIDENCE & CLAIM SCHEMAS (the core of the project)
# =============================================================================
#
# WHEN USED:
# - Evidence: Created by EvidenceRetriever, tagged by the trust-tier classifier
# - Claim: Created by the VerificationPipeline once a claim reaches a verdict
# - VerificationSummary: Counts over all claims of one verify request
#

class Evidence(ApiModel):
    """
    A retrieved source snippet with its trust tier.

    USED BY: EvidenceRetriever, ClaimAdjudicator, QueryTrustScorer
    Immutable once retrieved.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    snippet: str = ""
    domain: str = ""
    trust_tier: TrustTier = Field(
        default="low",
        description="Coarse reliability of the source domain",
    )


class Claim(ApiModel):
    """
    An atomic claim with its verdict.

    LIFECYCLE:
    1. ClaimExtractor proposes the text and type
    2. MisconceptionMatcher may settle it immediately (contradicted)
    3. Otherwise EvidenceRetriever + ClaimAdjudicator assign the verdict
    Opinions and predictions never get evidence.
    """
    text: str
    type: ClaimType
    status: ClaimStatus
    explanation: str
    evidence: list[Evidence] = Field(
        default_factory=list,
        max_length=MAX_EVIDENCE_PER_CLAIM,
    )
    agreement_count: int = Field(
        default=0, ge=0,
        description="How many evidence items concur with the verdict",
    )


class VerificationSummary(ApiModel):
    """Verdict counts for one verify request."""
    total: int = 0
    supported: int = 0
    contradicted: int = 0
    unverified: int = 0
    opinions: int = 0


class AnswerResult(ApiModel):
    """
    A scored answer to an open question.

    USED BY: QueryTrustScorer (search path). Transient, never aggregated.
    """
    query: str
    answer: str
    trust_score: int = Field(ge=0, le=100)
    evidence: list[Evidence] = Field(default_factory=list)
    agreement_count: int = 0
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# RANKING SCHEMAS
# =============================================================================

class Ranking(ApiModel):
    """Reliability statistics for one content source, derived on every read."""
    name: str
    checks_count: int
    supported_rate: int
    contradicted_rate: int
    score: int


class RankingCounts(ApiModel):
    """
    Explicit verdict counts for POST /api/rankings.

    The legacy names (verified/false/unconfirmed) are accepted too.
    """
    supported: int = Field(default=0, ge=0, validation_alias=AliasChoices("supported", "verified"))
    contradicted: int = Field(default=0, ge=0, validation_alias=AliasChoices("contradicted", "false"))
    unverified: int = Field(default=0, ge=0, validation_alias=AliasChoices("unverified", "unconfirmed"))
    opinions: int = Field(default=0, ge=0)


# =============================================================================
# API REQUEST SCHEMAS
# =============================================================================
#
# Fields default to "" so that missing values reach the route's own
# validation and produce a readable 400 message.
#

SOURCE_LABEL_ALIASES = AliasChoices("sourceLabel", "aiSource", "source_label")


class VerifyRequest(ApiModel):
    """
    Request body for POST /api/verify.

    Example:
        {"content": "The Great Wall of China is visible from space.", "sourceLabel": "ChatGPT"}
    """
    content: str = ""
    source_label: str = Field(default="", validation_alias=SOURCE_LABEL_ALIASES)


class AskRequest(ApiModel):
    """Request body for POST /api/ask."""
    question: str = ""


class SearchRequest(ApiModel):
    """Request body for POST /api/search."""
    query: str = ""


class RecordRankingRequest(ApiModel):
    """Request body for POST /api/rankings."""
    source_label: str = Field(default="", validation_alias=SOURCE_LABEL_ALIASES)
    counts: RankingCounts = Field(default_factory=RankingCounts)


class RephraseRequest(ApiModel):
    """Request body for POST /api/rephrase."""
    text: str = ""


# =============================================================================
# API RESPONSE SCHEMAS
# =============================================================================

class VerifyResponse(ApiModel):
    claims: list[Claim] = Field(max_length=MAX_CLAIMS_PER_TEXT)
    summary: VerificationSummary
    summary_text: str | None = None
    message: str | None = None


class AskResponse(ApiModel):
    answer: str
    sources: list[Evidence] = Field(default_factory=list)
    confidence: ConfidenceLabel = "low"


class SearchResponse(ApiModel):
    query: str
    answer: str
    trust_score: int = Field(ge=0, le=100)
    sources: list[Evidence] = Field(default_factory=list)
    source_agreement: int = 0
    warnings: list[str] = Field(default_factory=list)


class RankingsResponse(ApiModel):
    rankings: list[Ranking]


class SuccessResponse(ApiModel):
    success: bool = True


class RephraseResponse(ApiModel):
    rephrased: str


class ErrorResponse(BaseModel):
    error: str
