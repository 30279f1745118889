"""
Aggregate Scorer / Rankings Store.

WHAT THIS DOES:
Keeps running verdict counts per content source ("ChatGPT", "Gemini", ...)
and turns them into reliability rankings on every read.

FORMULA (per source, recomputed on each read):
    factual          = supported + contradicted + unverified
    supported_rate   = round(100 × supported / factual)
    contradicted_rate = round(100 × contradicted / factual)
    score            = supported_rate - penalty × contradicted_rate

The penalty (default 2) makes one false claim cost more than one true claim
earns. Rounding is half-up. Sources with no factual claims are not listed.

WHAT COUNTS:
Only fact-typed claims feed the counters. Opinions and predictions from a
verify run are ignored; explicit opinion counts (POST /api/rankings) go to
opinion_count, which never enters the rates.

CONCURRENCY:
One threading.Lock per source name (plus one for creating new names), so
N concurrent record() calls for one name always add exactly N checks,
whether they come from threads or coroutines.

Storage is process memory only and resets on restart.

USAGE:
    store = InMemoryRankingsStore(contradiction_penalty=2)
    store.record("ChatGPT", claims)
    for ranking in store.list():
        print(ranking.name, ranking.score)
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

from trustie.models.schemas import Claim, Ranking, RankingCounts

logger = logging.getLogger(__name__)


@dataclass
class SourceAccumulator:
    """Running counts for one content source."""
    name: str
    total_checks: int = 0
    supported_count: int = 0
    contradicted_count: int = 0
    unconfirmed_count: int = 0
    opinion_count: int = 0

    @property
    def factual_count(self) -> int:
        return self.supported_count + self.contradicted_count + self.unconfirmed_count


def _percent(part: int, whole: int) -> int:
    """round(100 × part / whole), half-up, in integer arithmetic."""
    return (200 * part + whole) // (2 * whole)


def compute_ranking(acc: SourceAccumulator, contradiction_penalty: int = 2) -> Ranking | None:
    """
    Derive a Ranking from stored counts.

    Returns None when the source has no factual claims yet.
    """
    factual = acc.factual_count
    if factual <= 0:
        return None
    supported_rate = _percent(acc.supported_count, factual)
    contradicted_rate = _percent(acc.contradicted_count, factual)
    return Ranking(
        name=acc.name,
        checks_count=acc.total_checks,
        supported_rate=supported_rate,
        contradicted_rate=contradicted_rate,
        score=supported_rate - contradiction_penalty * contradicted_rate,
    )


def counts_from_claims(claims: list[Claim]) -> RankingCounts:
    """Verdict counts over the fact-typed claims of one verify run."""
    facts = [c for c in claims if c.type == "fact"]
    return RankingCounts(
        supported=sum(1 for c in facts if c.status == "supported"),
        contradicted=sum(1 for c in facts if c.status == "contradicted"),
        unverified=sum(1 for c in facts if c.status == "unverified"),
    )


class RankingsStore(ABC):
    """Process-wide per-source reliability statistics."""

    @abstractmethod
    def record(self, source_name: str, claims: list[Claim]) -> None:
        """Add the fact-typed verdicts of one verify run."""
        pass

    @abstractmethod
    def record_counts(self, source_name: str, counts: RankingCounts) -> None:
        """Add explicit verdict counts as one check."""
        pass

    @abstractmethod
    def list(self) -> list[Ranking]:
        """Rankings sorted by score (highest first), ties by name."""
        pass

    @abstractmethod
    def get(self, source_name: str) -> SourceAccumulator | None:
        """Snapshot of one source's counts, or None if never recorded."""
        pass


class InMemoryRankingsStore(RankingsStore):
    """RankingsStore kept in process memory."""

    def __init__(self, contradiction_penalty: int = 2):
        self.contradiction_penalty = contradiction_penalty
        self._accumulators: dict[str, SourceAccumulator] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _entry(self, source_name: str) -> tuple[SourceAccumulator, threading.Lock]:
        """Accumulator and lock for a name, created on first use."""
        with self._registry_lock:
            if source_name not in self._accumulators:
                self._accumulators[source_name] = SourceAccumulator(name=source_name)
                self._locks[source_name] = threading.Lock()
                logger.info(f"New ranking source: '{source_name}'")
            return self._accumulators[source_name], self._locks[source_name]

    def record(self, source_name: str, claims: list[Claim]) -> None:
        self.record_counts(source_name, counts_from_claims(claims))

    def record_counts(self, source_name: str, counts: RankingCounts) -> None:
        acc, lock = self._entry(source_name)
        with lock:
            acc.total_checks += 1
            acc.supported_count += counts.supported
            acc.contradicted_count += counts.contradicted
            acc.unconfirmed_count += counts.unverified
            acc.opinion_count += counts.opinions
        logger.info(
            f"Recorded check for '{source_name}': +{counts.supported} supported, "
            f"+{counts.contradicted} contradicted, +{counts.unverified} unverified"
        )

    def list(self) -> list[Ranking]:
        with self._registry_lock:
            entries = [(acc, self._locks[name]) for name, acc in self._accumulators.items()]

        rankings = []
        for acc, lock in entries:
            with lock:
                ranking = compute_ranking(acc, self.contradiction_penalty)
            if ranking is not None:
                rankings.append(ranking)
        return sorted(rankings, key=lambda r: (-r.score, r.name))

    def get(self, source_name: str) -> SourceAccumulator | None:
        with self._registry_lock:
            acc = self._accumulators.get(source_name)
            lock = self._locks.get(source_name)
        if acc is None:
            return None
        with lock:
            return replace(acc)
