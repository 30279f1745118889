"""
Claim Extractor Service.

WHAT THIS DOES:
Breaks normalized text into atomic claims, each typed as a fact,
an opinion or a prediction. This is the first backend-facing step
of the verification pipeline.

WHY THIS MATTERS:
A verdict only means something for a single statement, so mixed text
is split first and each piece gets its own verdict.
Only facts are checked against evidence; opinions and predictions are
reported as such and never touch retrieval.

EXAMPLE:
    Text: "The Eiffel Tower is 330 metres tall. It is the most beautiful
           building in Paris. It will attract 10 million visitors next year."

    Extracted claims:
    1. "The Eiffel Tower is 330 metres tall" (fact)
    2. "The Eiffel Tower is the most beautiful building in Paris" (opinion)
    3. "The Eiffel Tower will attract 10 million visitors next year" (prediction)

COST BOUNDS:
- Long text is split into at most `max_chunks` chunks (one backend call each)
- Output is deduplicated case-insensitively and capped at `max_claims`

FAILURE POLICY:
A chunk whose call fails or whose reply can't be parsed contributes zero
claims. Extraction never aborts the request.

USAGE:
    extractor = ClaimExtractor(backend)
    claims = await extractor.extract(text)
"""

import asyncio
import logging
import re
from dataclasses import dataclass

from trustie.config import get_settings
from trustie.errors import BackendError, ParseError
from trustie.models.schemas import MAX_CLAIMS_PER_TEXT, ClaimType
from trustie.services.backend import ReasoningBackend
from trustie.services.parsing import extract_json_array

logger = logging.getLogger(__name__)

CLAIM_TYPES: set[str] = {"fact", "opinion", "prediction"}

EXTRACTION_PROMPT = """Extract ALL factual claims from this text that can be verified. Be thorough - do not skip any verifiable statements.

TEXT TO ANALYZE:
\"\"\"
{text}
\"\"\"

INSTRUCTIONS:
1. Extract EVERY statement that makes a factual claim (dates, numbers, events, scientific facts, historical facts, etc.)
2. Each claim must be a single, self-contained statement (resolve pronouns like "it" or "they")
3. Mark opinions (subjective judgements) as "opinion" and statements about the future as "prediction"
4. Write a specific web search query that would verify each claim
5. Do NOT skip well-known facts - they should still be verified

Return ONLY a JSON array in this exact format:
[
  {{
    "claim": "The exact factual claim from the text",
    "type": "fact" | "opinion" | "prediction",
    "searchQuery": "specific search query to verify this claim"
  }}
]

If no claims exist, return: []
Return ONLY the JSON array, no other text."""

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


@dataclass
class ExtractedClaim:
    """A claim proposed by the extractor, before any verdict."""
    text: str
    type: ClaimType = "fact"
    search_query: str = ""

    @property
    def query(self) -> str:
        """Search query for evidence retrieval (falls back to the claim text)."""
        return self.search_query or self.text

    def __repr__(self):
        return f"ExtractedClaim({self.text[:50]!r}, type={self.type})"


def claim_key(text: str) -> str:
    """Case- and whitespace-insensitive identity of a claim."""
    return " ".join(text.split()).casefold()


def split_sentences(text: str) -> list[str]:
    """Sentences of `text`, split on terminal punctuation and paragraph breaks."""
    sentences = []
    for paragraph in _PARAGRAPH_SPLIT.split(text):
        sentences.extend(s.strip() for s in _SENTENCE_SPLIT.split(paragraph.strip()) if s.strip())
    return sentences


def split_into_chunks(text: str, chunk_chars: int, max_chunks: int) -> list[str]:
    """
    Split text into at most `max_chunks` chunks of roughly `chunk_chars`.

    Splits on paragraph boundaries first, then sentences; a single sentence
    longer than `chunk_chars` is cut hard. Text beyond the last chunk is
    dropped (cost bound).
    """
    text = text.strip()
    if not text:
        return []
    if len(text) <= chunk_chars:
        return [text]

    pieces: list[str] = []
    for paragraph in _PARAGRAPH_SPLIT.split(text):
        for sentence in _SENTENCE_SPLIT.split(paragraph.strip()):
            while len(sentence) > chunk_chars:
                pieces.append(sentence[:chunk_chars])
                sentence = sentence[chunk_chars:]
            if sentence:
                pieces.append(sentence)

    chunks: list[str] = []
    current = ""
    for piece in pieces:
        if current and len(current) + 1 + len(piece) > chunk_chars:
            chunks.append(current)
            if len(chunks) == max_chunks:
                logger.info(f"Text exceeds {max_chunks} chunks; remainder not analyzed")
                return chunks
            current = piece
        else:
            current = f"{current} {piece}" if current else piece
    if current:
        chunks.append(current)
    return chunks[:max_chunks]


def parse_extracted_claims(reply: str) -> list[ExtractedClaim]:
    """
    Parse a backend reply into claims.

    Tolerates prose around the JSON array, non-object items, blank claims
    and unknown types (treated as facts).

    Raises:
        ParseError: if the reply has no well-formed JSON array
    """
    items = extract_json_array(reply)
    claims = []
    for item in items:
        if not isinstance(item, dict):
            continue
        text = str(item.get("claim") or item.get("text") or "").strip()
        if not text:
            continue
        claim_type = str(item.get("type") or "fact").strip().lower()
        if claim_type not in CLAIM_TYPES:
            claim_type = "fact"
        search_query = str(item.get("searchQuery") or item.get("search_query") or "").strip()
        claims.append(ExtractedClaim(text=text, type=claim_type, search_query=search_query))
    return claims


def dedupe_claims(claims: list[ExtractedClaim], limit: int) -> list[ExtractedClaim]:
    """Drop case-variant duplicates (first occurrence wins) and cap the list."""
    seen: set[str] = set()
    unique = []
    for claim in claims:
        key = claim_key(claim.text)
        if key in seen:
            continue
        seen.add(key)
        unique.append(claim)
        if len(unique) >= limit:
            break
    return unique


class ClaimExtractor:
    """
    Extracts typed atomic claims from text.

    Pipeline position:
    Text → Normalizer → [ClaimExtractor] → Claims → EvidenceRetriever → ...
    """

    def __init__(
        self,
        backend: ReasoningBackend,
        max_claims: int | None = None,
        chunk_chars: int | None = None,
        max_chunks: int | None = None,
    ):
        settings = get_settings()
        self.backend = backend
        self.max_claims = min(max_claims or settings.max_claims, MAX_CLAIMS_PER_TEXT)
        self.chunk_chars = chunk_chars or settings.extraction_chunk_chars
        self.max_chunks = max_chunks or settings.extraction_max_chunks

    async def extract(self, text: str) -> list[ExtractedClaim]:
        """
        Extract claims from normalized text.

        Args:
            text: Normalized input text

        Returns:
            At most `max_claims` unique claims, in text order
        """
        chunks = split_into_chunks(text, self.chunk_chars, self.max_chunks)
        if not chunks:
            return []

        logger.info(f"Extracting claims from {len(text)} chars in {len(chunks)} chunk(s)")

        # gather keeps chunk order
        per_chunk = await asyncio.gather(*(self._extract_chunk(c, i) for i, c in enumerate(chunks)))
        claims = dedupe_claims([c for chunk_claims in per_chunk for c in chunk_claims], self.max_claims)

        logger.info(f"Extracted {len(claims)} claims")
        return claims

    async def _extract_chunk(self, chunk: str, index: int) -> list[ExtractedClaim]:
        """One backend call for one chunk; failures yield no claims."""
        result = await self.backend.submit(EXTRACTION_PROMPT.format(text=chunk), max_tokens=2000)
        try:
            return parse_extracted_claims(result.unwrap())
        except BackendError as e:
            logger.warning(f"Claim extraction failed for chunk {index}: {e.reason}")
        except ParseError as e:
            logger.warning(f"Could not parse claims for chunk {index}: {e}")
        return []


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def extract_claims(text: str, backend: ReasoningBackend) -> list[ExtractedClaim]:
    """
    Convenience function to extract claims from text.

    Example:
        claims = await extract_claims("Water boils at 100 C at sea level.", backend)
    """
    extractor = ClaimExtractor(backend)
    return await extractor.extract(text)
