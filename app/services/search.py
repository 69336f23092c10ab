"""Lightweight lexical search helpers used before handing insights to the LLM."""

import re
from typing import List

STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "to", "of", "and", "in", "that", "for", "on", "with", "as", "it", "by",
    "at", "this", "from", "what", "when", "where", "who", "how", "why",
    "can", "could", "would", "should", "do", "does", "did", "have", "has",
    "me", "my", "we", "our", "you", "your", "they", "them", "their",
    "about", "say",
})

MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 3

_NON_WORD_RE = re.compile(r"[^\w\s'-]")
_EDGE_QUOTES_RE = re.compile(r"^['\"]|['\"]$")


def extract_keywords(question: str) -> List[str]:
    """
    Turn a natural-language question into search terms.

    Lowercases, strips punctuation, drops stop words and tokens of two
    characters or fewer, dedupes in order and keeps at most MAX_KEYWORDS.
    This is a coarse recall filter, not a ranking.
    """
    if not question or not isinstance(question, str):
        return []

    words = _NON_WORD_RE.sub(" ", question.lower()).split()
    keywords: List[str] = []
    for word in words:
        word = _EDGE_QUOTES_RE.sub("", word).strip()
        if len(word) < MIN_KEYWORD_LENGTH or word in STOP_WORDS:
            continue
        if word not in keywords:
            keywords.append(word)
        if len(keywords) == MAX_KEYWORDS:
            break
    return keywords


def escape_like(term: str) -> str:
    """Escape LIKE metacharacters so the term matches literally (ESCAPE '\\')."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def suggest_tag_name(content: str, max_words: int = 3, max_length: int = 30) -> str:
    """Starting name for a new tag: the first few meaningful words of the content."""
    if not content or not isinstance(content, str):
        return ""
    words = [w for w in content.strip().split() if len(w) > 1 and w.lower() not in STOP_WORDS]
    phrase = " ".join(words[:max_words]).lower()[:max_length]
    return re.sub(r"[^\w\s-]", "", phrase).strip()
