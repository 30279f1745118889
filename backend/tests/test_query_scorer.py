"""
Tests for the query trust score and warnings.
"""

import itertools
import json

import pytest

from conftest import FakeBackend, sources_json
from trustie.models.schemas import Evidence
from trustie.services.trust.evidence_retriever import RetrievedAnswer
from trustie.services.trust.query_scorer import (
    HEDGING_WARNING,
    LIMITED_SOURCES_WARNING,
    NO_CREDIBLE_SOURCE_WARNING,
    QueryTrustScorer,
    TrustScoreWeights,
    compute_trust_score,
    generate_warnings,
)

HEDGING = ["may", "might", "could", "possibly", "reportedly", "allegedly"]


def _evidence(tier: str, n: int = 0) -> Evidence:
    return Evidence(url=f"https://site{n}.example", title=f"Site {n}", domain=f"site{n}.example", trust_tier=tier)


# =============================================================================
# TRUST SCORE
# =============================================================================

def test_one_high_one_low_with_agreement_two():
    evidence = [_evidence("high", 1), _evidence("low", 2)]
    assert compute_trust_score(evidence, agreement_count=2) == 75


def test_strong_agreement_bonus():
    evidence = [_evidence("medium", 1), _evidence("medium", 2), _evidence("medium", 3)]
    # 50 + 3*8 + 20
    assert compute_trust_score(evidence, agreement_count=3) == 94


def test_no_credible_source_penalty():
    evidence = [_evidence("low", 1), _evidence("low", 2)]
    # 50 + 10 - 20
    assert compute_trust_score(evidence, agreement_count=2) == 40


def test_empty_evidence():
    assert compute_trust_score([], agreement_count=0) == 30


def test_score_is_clamped_to_100():
    evidence = [_evidence("high", i) for i in range(5)]
    assert compute_trust_score(evidence, agreement_count=5) == 100


def test_score_is_clamped_to_0():
    weights = TrustScoreWeights(base=0, no_credible_penalty=50)
    assert compute_trust_score([_evidence("low")], agreement_count=0, weights=weights) == 0


def test_score_always_within_bounds():
    tiers = ["high", "medium", "low"]
    for size in range(6):
        for combo in itertools.product(tiers, repeat=size):
            evidence = [_evidence(tier, i) for i, tier in enumerate(combo)]
            for agreement in range(size + 2):
                assert 0 <= compute_trust_score(evidence, agreement) <= 100


def test_weights_are_configurable():
    weights = TrustScoreWeights(base=10, high_weight=1, partial_agreement_bonus=0)
    assert compute_trust_score([_evidence("high")], agreement_count=2, weights=weights) == 11


# =============================================================================
# WARNINGS
# =============================================================================

def test_warnings_for_weak_sourcing():
    warnings = generate_warnings([_evidence("low")], "Paris is the capital of France.", HEDGING)
    assert warnings == [NO_CREDIBLE_SOURCE_WARNING, LIMITED_SOURCES_WARNING]


def test_no_warnings_for_strong_sourcing():
    evidence = [_evidence("high", 1), _evidence("medium", 2)]
    assert generate_warnings(evidence, "Paris is the capital of France.", HEDGING) == []


def test_hedging_warning():
    evidence = [_evidence("high", 1), _evidence("high", 2)]
    warnings = generate_warnings(evidence, "The drug might reduce symptoms.", HEDGING)
    assert warnings == [HEDGING_WARNING]


def test_hedging_is_whole_word():
    evidence = [_evidence("high", 1), _evidence("high", 2)]
    # substrings of longer words are not hedging
    assert generate_warnings(evidence, "The mayor expressed dismay.", HEDGING) == []


# =============================================================================
# SCORER
# =============================================================================

def test_score_answer_sorts_and_caps_evidence(fake_backend):
    retrieved = RetrievedAnswer(
        answer="Answer text.",
        evidence=[_evidence("low", i) for i in range(4)] + [_evidence("high", 9), _evidence("medium", 8)],
        agreement_count=2,
    )
    result = QueryTrustScorer(fake_backend, hedging_terms=HEDGING).score_answer("q", retrieved)

    assert len(result.evidence) == 5
    assert [e.trust_tier for e in result.evidence[:2]] == ["high", "medium"]


@pytest.mark.asyncio
async def test_score_end_to_end():
    reply = json.dumps({
        "answer": "The Eiffel Tower is about 330 metres tall.",
        "sources": json.loads(sources_json("someblog.net", "britannica.com")),
        "agreementCount": 2,
    })
    backend = FakeBackend().queue(reply)

    result = await QueryTrustScorer(backend, hedging_terms=HEDGING).score("How tall is the Eiffel Tower?")

    assert result.query == "How tall is the Eiffel Tower?"
    assert result.trust_score == 75
    assert [e.domain for e in result.evidence] == ["britannica.com", "someblog.net"]
    assert result.agreement_count == 2
    assert result.warnings == []
