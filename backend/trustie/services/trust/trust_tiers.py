"""
Trust-Tier Classifier.

WHAT THIS DOES:
Maps a source domain to a coarse reliability tier: high, medium or low.
Shared by every component that consumes evidence.

TIERS:
- high:   government/education/international bodies, scientific publishers,
          major encyclopedic references
- medium: mainstream news outlets
- low:    everything else

Domains are matched on label boundaries ("nature.com" matches
"www.nature.com" but not "signature.com"). A few publisher names
("pubmed", "sciencedirect") match anywhere in the host.
A full URL is accepted in place of a domain.

USAGE:
    classify_domain("nasa.gov")      # → "high"
    classify_domain("reuters.com")   # → "medium"
    classify_domain("someblog.net")  # → "low"
"""

from urllib.parse import urlparse

from trustie.models.schemas import Evidence, TrustTier

# Government, education, international bodies
HIGH_TRUST_SUFFIXES: tuple[str, ...] = (
    ".gov", ".edu", ".mil", ".int",
    ".gov.uk", ".ac.uk", ".gc.ca", ".gov.au", ".edu.au",
)

# Scientific publishers and major references
HIGH_TRUST_DOMAINS: tuple[str, ...] = (
    "nature.com", "science.org", "cell.com", "thelancet.com", "nejm.org",
    "bmj.com", "plos.org", "wiley.com", "arxiv.org", "jstor.org",
    "wikipedia.org", "britannica.com", "merriam-webster.com",
)
HIGH_TRUST_NAMES: tuple[str, ...] = ("pubmed", "sciencedirect", "springer", "scholar.google")

MEDIUM_TRUST_DOMAINS: tuple[str, ...] = (
    "reuters.com", "apnews.com", "bbc.com", "bbc.co.uk", "npr.org", "pbs.org",
    "nytimes.com", "washingtonpost.com", "theguardian.com", "wsj.com",
    "economist.com", "ft.com", "bloomberg.com", "forbes.com",
    "cnn.com", "cbsnews.com", "nbcnews.com", "abcnews.go.com",
    "aljazeera.com", "cbc.ca", "abc.net.au", "nationalgeographic.com",
    "scientificamerican.com", "time.com", "theatlantic.com", "espn.com",
)

_TIER_ORDER: dict[str, int] = {"high": 0, "medium": 1, "low": 2}


def extract_domain(url: str) -> str:
    """Best-effort host extraction from a URL, without a leading "www."."""
    if not url:
        return ""
    try:
        host = (urlparse(url if "//" in url else f"//{url}").hostname or "").lower()
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def _on_domain(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def classify_domain(domain: str) -> TrustTier:
    """Classify a domain (or URL) into a trust tier."""
    host = extract_domain((domain or "").strip())
    if not host:
        return "low"
    if host.endswith(HIGH_TRUST_SUFFIXES):
        return "high"
    if any(_on_domain(host, d) for d in HIGH_TRUST_DOMAINS):
        return "high"
    if any(name in host for name in HIGH_TRUST_NAMES):
        return "high"
    if any(_on_domain(host, d) for d in MEDIUM_TRUST_DOMAINS):
        return "medium"
    return "low"


def sort_by_trust(evidence: list[Evidence]) -> list[Evidence]:
    """Return evidence ordered high → medium → low (stable within a tier)."""
    return sorted(evidence, key=lambda e: _TIER_ORDER[e.trust_tier])


def count_tiers(evidence: list[Evidence]) -> dict[str, int]:
    """Count evidence items per tier."""
    counts = {"high": 0, "medium": 0, "low": 0}
    for item in evidence:
        counts[item.trust_tier] += 1
    return counts
