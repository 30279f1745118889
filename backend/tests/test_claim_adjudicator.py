"""
Tests for the claim adjudicator: JSON parsing, heuristics, defaults.
"""

import pytest

from conftest import FakeBackend, verdict_json
from trustie.models.schemas import Evidence
from trustie.services.backend import BackendResult
from trustie.services.trust.claim_adjudicator import (
    NO_EVIDENCE_EXPLANATION,
    UNREADABLE_EXPLANATION,
    ClaimAdjudicator,
    heuristic_adjudication,
)

CLAIM = "Mount Everest is the tallest mountain above sea level"


@pytest.fixture
def evidence():
    return [
        Evidence(url="https://www.britannica.com/everest", title="Everest", domain="britannica.com", trust_tier="high"),
        Evidence(url="https://www.bbc.com/everest", title="Everest height", domain="bbc.com", trust_tier="medium"),
    ]


@pytest.mark.asyncio
async def test_empty_evidence_skips_backend(fake_backend):
    verdict = await ClaimAdjudicator(fake_backend).adjudicate(CLAIM, [])

    assert verdict.status == "unverified"
    assert verdict.explanation == NO_EVIDENCE_EXPLANATION
    assert fake_backend.calls == []


@pytest.mark.asyncio
async def test_json_verdict(evidence):
    backend = FakeBackend().queue(verdict_json("supported", "Both sources confirm it.", agreement=2))

    verdict = await ClaimAdjudicator(backend).adjudicate(CLAIM, evidence)

    assert verdict.status == "supported"
    assert verdict.explanation == "Both sources confirm it."
    assert verdict.agreement_count == 2
    assert "britannica.com" in backend.calls[0]["prompt"]
    assert backend.calls[0]["web_search"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw_status, status",
    [("verified", "supported"), ("TRUE", "supported"), ("false", "contradicted"), ("unconfirmed", "unverified")],
)
async def test_status_synonyms(evidence, raw_status, status):
    backend = FakeBackend().queue(verdict_json(raw_status, agreement=1))
    verdict = await ClaimAdjudicator(backend).adjudicate(CLAIM, evidence)
    assert verdict.status == status


@pytest.mark.asyncio
@pytest.mark.parametrize("agreement, expected", [(7, 2), (-3, 0), (None, 2), ("1", 1)])
async def test_agreement_is_clamped(evidence, agreement, expected):
    backend = FakeBackend().queue(verdict_json("supported", agreement=agreement))
    verdict = await ClaimAdjudicator(backend).adjudicate(CLAIM, evidence)
    assert verdict.agreement_count == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("literal", ["1e999", "Infinity", "NaN"])
async def test_non_finite_agreement_defaults_to_evidence_count(evidence, literal):
    backend = FakeBackend().queue(f'{{"status": "supported", "explanation": "Confirmed.", "agreementCount": {literal}}}')

    verdict = await ClaimAdjudicator(backend).adjudicate(CLAIM, evidence)

    assert verdict.status == "supported"
    assert verdict.agreement_count == 2


@pytest.mark.asyncio
async def test_explanation_is_formalized(evidence):
    backend = FakeBackend().queue(verdict_json("contradicted", "It's false and sources don't agree.", agreement=2))
    verdict = await ClaimAdjudicator(backend).adjudicate(CLAIM, evidence)
    assert verdict.explanation == "It is false and sources do not agree."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply, status",
    [
        ("This claim is a well-known myth.", "contradicted"),
        ("That is not true at all.", "contradicted"),
        ("The claim is accurate according to both sources.", "supported"),
    ],
)
async def test_keyword_heuristic_on_prose(evidence, reply, status):
    verdict = await ClaimAdjudicator(FakeBackend().queue(reply)).adjudicate(CLAIM, evidence)
    assert verdict.status == status


def test_falsity_markers_win_over_truth_markers():
    assert heuristic_adjudication("Not true, although partly accurate.").status == "contradicted"


@pytest.mark.asyncio
async def test_unreadable_reply_is_unverified(evidence):
    verdict = await ClaimAdjudicator(FakeBackend().queue("Hmm, hard to say.")).adjudicate(CLAIM, evidence)
    assert verdict.status == "unverified"
    assert verdict.explanation == UNREADABLE_EXPLANATION


@pytest.mark.asyncio
async def test_unknown_status_falls_back_to_heuristic(evidence):
    backend = FakeBackend().queue('{"status": "maybe", "explanation": "The sources are mixed."}')
    verdict = await ClaimAdjudicator(backend).adjudicate(CLAIM, evidence)
    assert verdict.status == "unverified"


@pytest.mark.asyncio
async def test_backend_failure_is_unverified(evidence):
    backend = FakeBackend().queue(BackendResult.failure("timeout"))
    verdict = await ClaimAdjudicator(backend).adjudicate(CLAIM, evidence)
    assert verdict.status == "unverified"
    assert verdict.agreement_count == 0
