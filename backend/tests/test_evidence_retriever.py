"""
Tests for evidence retrieval: tagging, ordering, bounds and failure policy.
"""

import json

import pytest

from conftest import FakeBackend, sources_json
from trustie.services.backend import BackendResult
from trustie.services.trust.evidence_retriever import (
    NO_ANSWER,
    EvidenceRetriever,
    to_evidence,
)


# =============================================================================
# to_evidence
# =============================================================================

def test_domain_is_derived_from_url():
    evidence = to_evidence({"url": "https://www.nasa.gov/earth", "title": "Earth"})
    assert evidence.domain == "nasa.gov"
    assert evidence.trust_tier == "high"


def test_defaults_for_missing_fields():
    evidence = to_evidence({"title": "Untitled page"})
    assert evidence.url == "#"
    assert evidence.snippet == ""
    assert evidence.trust_tier == "low"


@pytest.mark.parametrize("raw", ["a string", 42, None, {"snippet": "no url, no title"}])
def test_junk_items_are_dropped(raw):
    assert to_evidence(raw) is None


# =============================================================================
# retrieve
# =============================================================================

@pytest.mark.asyncio
async def test_retrieve_sorts_high_tier_first():
    backend = FakeBackend().queue(sources_json("someblog.net", "reuters.com", "nasa.gov"))
    retriever = EvidenceRetriever(backend, max_results=3)

    evidence = await retriever.retrieve("Is the Moon drifting away from Earth?")

    assert [e.trust_tier for e in evidence] == ["high", "medium", "low"]
    assert [e.domain for e in evidence] == ["nasa.gov", "reuters.com", "someblog.net"]
    assert backend.calls[0]["web_search"] is True


@pytest.mark.asyncio
async def test_retrieve_truncates_to_requested_count():
    backend = FakeBackend().queue(sources_json("a.com", "b.gov", "c.com", "d.edu", "e.com", "f.com"))
    evidence = await EvidenceRetriever(backend, max_results=3).retrieve("query")

    assert len(evidence) == 3
    assert [e.domain for e in evidence] == ["b.gov", "d.edu", "a.com"]


@pytest.mark.parametrize("requested, bound", [(1, 2), (3, 3), (9, 5)])
def test_result_count_is_bounded(fake_backend, requested, bound):
    assert EvidenceRetriever(fake_backend, max_results=requested).max_results == bound


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        BackendResult.failure("timeout"),
        "Sorry, I could not search right now.",
        "[]",
    ],
)
async def test_retrieve_degrades_to_empty(reply):
    backend = FakeBackend().queue(reply)
    assert await EvidenceRetriever(backend).retrieve("query") == []


# =============================================================================
# retrieve_answer
# =============================================================================

@pytest.mark.asyncio
async def test_retrieve_answer_parses_sources_and_agreement():
    reply = json.dumps({
        "answer": "Mount Everest is 8,849 metres tall and it's the highest peak.",
        "sources": json.loads(sources_json("britannica.com", "someblog.net")),
        "agreementCount": 2,
    })
    result = await EvidenceRetriever(FakeBackend().queue(reply)).retrieve_answer("How tall is Everest?")

    assert result.answer == "Mount Everest is 8,849 metres tall and it is the highest peak."
    assert [e.trust_tier for e in result.evidence] == ["high", "low"]
    assert result.agreement_count == 2


@pytest.mark.asyncio
async def test_missing_agreement_defaults_to_source_count():
    reply = json.dumps({"answer": "Yes.", "sources": json.loads(sources_json("a.com", "b.com", "c.com"))})
    result = await EvidenceRetriever(FakeBackend().queue(reply)).retrieve_answer("question")
    assert result.agreement_count == 3


@pytest.mark.asyncio
async def test_infinite_agreement_defaults_to_source_count():
    sources = sources_json("a.com", "b.com")
    reply = f'{{"answer": "Yes, it is.", "sources": {sources}, "agreementCount": Infinity}}'
    result = await EvidenceRetriever(FakeBackend().queue(reply)).retrieve_answer("question")
    assert result.agreement_count == 2


@pytest.mark.asyncio
async def test_unparseable_answer_uses_raw_text():
    result = await EvidenceRetriever(FakeBackend().queue("Plain prose answer.")).retrieve_answer("q")
    assert result.answer == "Plain prose answer."
    assert result.evidence == []
    assert result.agreement_count == 0


@pytest.mark.asyncio
async def test_failed_answer_call_apologizes():
    backend = FakeBackend().queue(BackendResult.failure("timeout"))
    result = await EvidenceRetriever(backend).retrieve_answer("q")
    assert result.answer == NO_ANSWER
    assert result.evidence == []
