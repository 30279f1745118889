"""
Claim Adjudicator Service.

WHAT THIS DOES:
Decides whether the retrieved evidence supports or contradicts a claim.

VERDICTS:
- supported:    the sources clearly support the claim
- contradicted: the sources clearly contradict the claim
- unverified:   the sources are unclear, insufficient or missing

EXAMPLE:
    Claim: "Mount Everest is the tallest mountain above sea level"
    Evidence:
      [high]   britannica.com: "Mount Everest, at 8,849 m, is the highest..."
      [medium] bbc.com: "...the world's highest peak, Everest..."
    → supported, agreement_count=2

DEFENSIVE PARSING:
The backend is asked for JSON, but replies are not always well-formed:
1. First well-formed JSON object in the reply
2. Otherwise a keyword heuristic on the reply ("false", "myth", "accurate"...)
3. Otherwise "unverified" with a generic explanation

COST CONTROL:
No evidence → "unverified" without calling the backend at all.

USAGE:
    adjudicator = ClaimAdjudicator(backend)
    verdict = await adjudicator.adjudicate(claim_text, evidence)
"""

import logging
import re
from dataclasses import dataclass
from typing import Literal

from trustie.errors import BackendError, ParseError
from trustie.models.schemas import Evidence
from trustie.services.backend import ReasoningBackend
from trustie.services.normalizer import formalize
from trustie.services.parsing import coerce_count, extract_json_object

logger = logging.getLogger(__name__)

Verdict = Literal["supported", "contradicted", "unverified"]

NO_EVIDENCE_EXPLANATION = "No relevant sources found to verify this claim. Consider searching manually."
UNREADABLE_EXPLANATION = "Could not evaluate this claim."
BACKEND_FAILURE_EXPLANATION = "This claim could not be checked because the verification service did not respond."

ADJUDICATION_PROMPT = """Evaluate whether this claim is TRUE or FALSE based on the sources provided.

CLAIM: "{claim}"

SOURCES:
{sources}

INSTRUCTIONS:
- If the sources clearly SUPPORT the claim → status: "supported"
- If the sources clearly CONTRADICT the claim → status: "contradicted"
- If the sources are unclear or insufficient → status: "unverified"
- Count how many sources agree with your verdict

Return ONLY JSON:
{{
  "status": "supported" | "contradicted" | "unverified",
  "explanation": "One or two sentences explaining why, in formal professional language with no contractions",
  "agreementCount": number of sources that agree with the verdict
}}"""

# Synonyms the backend uses despite the instructions
_STATUS_SYNONYMS: dict[str, Verdict] = {
    "supported": "supported",
    "supports": "supported",
    "verified": "supported",
    "true": "supported",
    "accurate": "supported",
    "contradicted": "contradicted",
    "contradicts": "contradicted",
    "false": "contradicted",
    "refuted": "contradicted",
    "inaccurate": "contradicted",
    "unverified": "unverified",
    "unconfirmed": "unverified",
    "uncertain": "unverified",
    "insufficient": "unverified",
}

# Falsity markers are checked first: "not true" contains "true"
_FALSITY_MARKERS = re.compile(
    r"\b(false|untrue|not true|incorrect|inaccurate|myth|misconception|debunked|"
    r"contradict(s|ed)?|refuted|wrong)\b",
    re.IGNORECASE,
)
_TRUTH_MARKERS = re.compile(
    r"\b(true|correct|accurate|confirmed|supported|supports|verified|consistent with)\b",
    re.IGNORECASE,
)


@dataclass
class Adjudication:
    """Verdict for one claim."""
    status: Verdict
    explanation: str
    agreement_count: int = 0


def format_sources(evidence: list[Evidence]) -> str:
    """Numbered source list for the prompt."""
    lines = []
    for i, item in enumerate(evidence, 1):
        lines.append(f"Source {i} ({item.trust_tier} trust, {item.domain}): {item.title}\n{item.snippet}")
    return "\n\n".join(lines)


def parse_adjudication(reply: str, evidence_count: int) -> Adjudication:
    """
    Parse a JSON verdict.

    agreementCount is clamped to [0, evidence_count] and defaults to
    evidence_count when absent.

    Raises:
        ParseError: if there is no JSON object or no recognizable status
    """
    data = extract_json_object(reply)
    raw_status = str(data.get("status") or data.get("verdict") or "").strip().lower()
    status = _STATUS_SYNONYMS.get(raw_status)
    if status is None:
        raise ParseError(f"unrecognized status: {raw_status!r}")

    explanation = str(data.get("explanation") or "").strip() or "Could not determine verification status."
    agreement = coerce_count(
        data.get("agreementCount", data.get("sourceAgreement")),
        default=evidence_count,
    )
    return Adjudication(
        status=status,
        explanation=formalize(explanation),
        agreement_count=min(agreement, evidence_count),
    )


def heuristic_adjudication(reply: str) -> Adjudication | None:
    """
    Best-guess verdict from the wording of an unparseable reply.

    Returns None if the reply gives no usable signal.
    """
    if not reply or not reply.strip():
        return None
    if _FALSITY_MARKERS.search(reply):
        return Adjudication(
            status="contradicted",
            explanation="The available sources indicate that this claim is false or a common misconception.",
        )
    if _TRUTH_MARKERS.search(reply):
        return Adjudication(
            status="supported",
            explanation="The available sources indicate that this claim is accurate.",
        )
    return None


class ClaimAdjudicator:
    """
    Combines a claim with its evidence into a verdict.

    Pipeline position:
    Claim → EvidenceRetriever → Evidence[] → [ClaimAdjudicator] → Verdict
    """

    def __init__(self, backend: ReasoningBackend):
        self.backend = backend

    async def adjudicate(self, claim: str, evidence: list[Evidence]) -> Adjudication:
        """
        Assign a verdict to a claim.

        Args:
            claim: The claim text
            evidence: Retrieved evidence (may be empty)

        Returns:
            Adjudication; never raises for backend or parse problems
        """
        if not evidence:
            return Adjudication(status="unverified", explanation=NO_EVIDENCE_EXPLANATION)

        prompt = ADJUDICATION_PROMPT.format(claim=claim, sources=format_sources(evidence))
        result = await self.backend.submit(prompt, max_tokens=500)

        try:
            reply = result.unwrap()
        except BackendError as e:
            logger.warning(f"Adjudication call failed for '{claim[:60]}': {e.reason}")
            return Adjudication(status="unverified", explanation=BACKEND_FAILURE_EXPLANATION)

        try:
            verdict = parse_adjudication(reply, len(evidence))
        except ParseError as e:
            logger.warning(f"Could not parse verdict for '{claim[:60]}': {e}; trying keyword heuristic")
            verdict = heuristic_adjudication(reply)
            if verdict is None:
                verdict = Adjudication(status="unverified", explanation=UNREADABLE_EXPLANATION)

        logger.info(f"Claim '{claim[:60]}' → {verdict.status} ({verdict.agreement_count}/{len(evidence)} agree)")
        return verdict


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def adjudicate_claim(claim: str, evidence: list[Evidence], backend: ReasoningBackend) -> Adjudication:
    """
    Convenience function to adjudicate one claim.
    """
    adjudicator = ClaimAdjudicator(backend)
    return await adjudicator.adjudicate(claim, evidence)
