"""
Misconception Matcher.

WHAT THIS DOES:
Settles well-known false claims deterministically, before any network call.
"The Great Wall of China is visible from space" is always contradicted,
with a stored correction, whatever the backend would have said.

WHY THIS MATTERS:
The reasoning backend is demonstrably unreliable on famous myths: they are
repeated so often online that search results and models echo them.
A fixed table guarantees the right verdict on a known set, and skips
the retrieval and adjudication calls for those claims.

DATA:
The table lives in data/misconceptions.json (versioned, auditable on its own):
    {
      "version": "2025.06.1",
      "default_unless": "...",
      "default_negation": "...",
      "entries": [{"id": ..., "pattern": ..., "correction": ..., "unless"?: ..., "negation"?: ...}]
    }
Patterns are tested in order, case-insensitively; the first hit wins.
Two patterns keep corrections of a myth out of the table:
- "unless" is searched in the whole claim ("it is a myth that ...").
- "negation" is searched only in the matched phrase and the few words
  just before it, in the same clause ("you cannot see the Great Wall
  from space"). A negation elsewhere in the sentence ("..., no doubt
  about it") leaves the myth flagged.
An entry may set either to null when its own pattern contains a negation.

USAGE:
    table = get_misconception_table()
    hit = table.match("The Great Wall of China is visible from space")
    if hit:
        print(hit.correction)
"""

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from trustie.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_TABLE_PATH = Path(__file__).resolve().parent.parent.parent / "data" / "misconceptions.json"

# Words before the matched phrase that are still searched for a negation
NEGATION_WINDOW_WORDS = 3

_CLAUSE_BREAK = re.compile(r"[,;:.!?]")


@dataclass(frozen=True)
class MisconceptionMatch:
    """A claim that matched a known misconception."""
    id: str
    correction: str


@dataclass(frozen=True)
class MisconceptionEntry:
    """One row of the misconception table, with compiled patterns."""
    id: str
    pattern: re.Pattern
    correction: str
    unless: re.Pattern | None = None
    negation: re.Pattern | None = None

    def matches(self, claim: str) -> bool:
        hit = self.pattern.search(claim)
        if not hit:
            return False
        if self.unless and self.unless.search(claim):
            return False
        if self.negation and self.negation.search(negation_scope(claim, hit)):
            return False
        return True


def negation_scope(claim: str, hit: re.Match) -> str:
    """The matched phrase plus the words leading into it within its clause."""
    clause = _CLAUSE_BREAK.split(claim[:hit.start()])[-1]
    lead = clause.split()[-NEGATION_WINDOW_WORDS:]
    return " ".join(lead + [hit.group(0)])


class MisconceptionTable:
    """Ordered, versioned list of known-false claim patterns."""

    def __init__(self, version: str, entries: list[MisconceptionEntry]):
        self.version = version
        self.entries = entries

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, claim: str) -> MisconceptionMatch | None:
        """Return the first entry matching `claim`, or None."""
        if not claim:
            return None
        for entry in self.entries:
            if entry.matches(claim):
                logger.info(f"Misconception '{entry.id}' matched claim: '{claim[:80]}'")
                return MisconceptionMatch(id=entry.id, correction=entry.correction)
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "MisconceptionTable":
        """
        Build a table from its JSON form.

        Raises:
            ValueError: if an entry is missing a field or has a bad regex
        """
        default_unless = data.get("default_unless") or None
        default_negation = data.get("default_negation") or None
        entries = []
        for i, raw in enumerate(data.get("entries", [])):
            try:
                unless = raw.get("unless", default_unless)
                negation = raw.get("negation", default_negation)
                entries.append(MisconceptionEntry(
                    id=raw["id"],
                    pattern=re.compile(raw["pattern"], re.IGNORECASE),
                    correction=raw["correction"],
                    unless=re.compile(unless, re.IGNORECASE) if unless else None,
                    negation=re.compile(negation, re.IGNORECASE) if negation else None,
                ))
            except (KeyError, re.error) as e:
                raise ValueError(f"Invalid misconception entry #{i}: {e}") from e
        return cls(version=str(data.get("version", "unversioned")), entries=entries)


def load_misconception_table(path: str | Path | None = None) -> MisconceptionTable:
    """Load and compile the table from a JSON file (bundled table by default)."""
    table_path = Path(path) if path else DEFAULT_TABLE_PATH
    with open(table_path, encoding="utf-8") as f:
        data = json.load(f)
    table = MisconceptionTable.from_dict(data)
    logger.info(f"Loaded misconception table v{table.version} ({len(table)} entries) from {table_path}")
    return table


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

@lru_cache
def get_misconception_table() -> MisconceptionTable:
    """Table configured in settings, loaded once per process."""
    return load_misconception_table(get_settings().misconceptions_path or None)


def match_misconception(claim: str) -> MisconceptionMatch | None:
    """
    Convenience function to check a claim against the configured table.

    Example:
        hit = match_misconception("Goldfish have a three-second memory")
        # hit.id == "goldfish-three-second-memory"
    """
    return get_misconception_table().match(claim)
