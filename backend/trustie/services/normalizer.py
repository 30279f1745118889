"""
Text Normalizer.

WHAT THIS DOES:
Canonicalizes raw pasted text before anything else sees it.
Text copied out of chat UIs is full of curly quotes, em-dashes, bullets,
emoji and non-breaking spaces. Normalizing first keeps prompts small and
lets the misconception patterns match plain ASCII punctuation.

RULES (applied in order):
1. Unicode NFC
2. Bullets → "-", then drop currency signs, emoji and decorative symbols
3. Dash variants → "-"
4. Curly single quotes/backticks → "'", curly/guillemet double quotes → '"'
5. "…" → "...", exotic spaces → " "
6. CRLF/CR → LF
7. Collapse horizontal whitespace, drop spaces around newlines,
   collapse 3+ newlines into one blank line, trim

normalize_text(normalize_text(x)) == normalize_text(x) for every x.

Also provides formalize(), which expands contractions so generated
explanations read in a consistent, formal register.
"""

import re
import unicodedata

_BULLETS = re.compile(
    "[•◦●○■□▪▫▸▹►▻"
    "◆◇★☆✓✔✗✘✦✧]"
)
_REMOVE = re.compile(
    "["
    "₿€£¥₹₽₩฿"  # currency
    "§¶†‡©®™°±²³µ¼½¾"
    "\U0001F300-\U0001FAFF"  # emoji
    "\u2600-\u26ff\u2700-\u27bf"  # dingbats
    "\ufe0f\u200d"  # emoji joiners
    "]"
)
_REPLACEMENTS = [
    (re.compile("[–—―‐‑‒−]"), "-"),
    (re.compile("[‘’‚‛`´]"), "'"),
    (re.compile("[“”„‟«»]"), '"'),
    (re.compile("…"), "..."),
    (re.compile("[\u00a0\u2000-\u200b\u202f\u205f\u3000]"), " "),
    (re.compile(r"\r\n?"), "\n"),
    (re.compile(r"[ \t\f\v]+"), " "),
    (re.compile(r" *\n *"), "\n"),
    (re.compile(r"\n{3,}"), "\n\n"),
]


def normalize_text(text: str) -> str:
    """
    Return the canonical form of `text`.

    Example:
        normalize_text("  “Hello” — world…  ")
        # → '"Hello" - world...'
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFC", text)
    text = _BULLETS.sub("-", text)
    text = _REMOVE.sub("", text)
    for pattern, replacement in _REPLACEMENTS:
        text = pattern.sub(replacement, text)
    # Removing a symbol can leave a base letter next to a combining mark
    text = unicodedata.normalize("NFC", text)
    return text.strip()


# =============================================================================
# FORMAL REGISTER
# =============================================================================

_IRREGULAR_CONTRACTIONS = {
    "won't": "will not",
    "can't": "cannot",
    "shan't": "shall not",
    "ain't": "is not",
    "let's": "let us",
    "it's": "it is",
    "that's": "that is",
    "there's": "there is",
    "here's": "here is",
    "what's": "what is",
    "who's": "who is",
    "he's": "he is",
    "she's": "she is",
    "i'm": "I am",
}
_IRREGULAR_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(k) for k in _IRREGULAR_CONTRACTIONS) + r")\b",
    re.IGNORECASE,
)
_SUFFIX_CONTRACTIONS = [
    (re.compile(r"\b(\w+)n't\b", re.IGNORECASE), r"\1 not"),
    (re.compile(r"\b(\w+)'re\b", re.IGNORECASE), r"\1 are"),
    (re.compile(r"\b(\w+)'ve\b", re.IGNORECASE), r"\1 have"),
    (re.compile(r"\b(\w+)'ll\b", re.IGNORECASE), r"\1 will"),
    (re.compile(r"\b(\w+)'d\b", re.IGNORECASE), r"\1 would"),
]


def _expand_irregular(match: re.Match) -> str:
    word = match.group(0)
    expanded = _IRREGULAR_CONTRACTIONS[word.lower()]
    if word[0].isupper() and expanded[0].islower():
        expanded = expanded[0].upper() + expanded[1:]
    return expanded


def formalize(text: str) -> str:
    """
    Expand English contractions.

    Example:
        formalize("It's not visible and you can't see it.")
        # → "It is not visible and you cannot see it."
    """
    if not text:
        return ""

    text = text.replace("’", "'")
    text = _IRREGULAR_PATTERN.sub(_expand_irregular, text)
    for pattern, replacement in _SUFFIX_CONTRACTIONS:
        text = pattern.sub(replacement, text)
    return text
