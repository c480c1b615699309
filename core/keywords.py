"""
Text normalization for FAQ keywords and chatbot queries.

Both functions are pure and defined for every input string; empty text
yields an empty list.
"""

import re
from typing import List

_WORD_RE = re.compile(r"\w+")

MIN_KEYWORD_LENGTH = 3
MIN_TERM_LENGTH = 3


def derive_keywords(question: str, answer: str) -> List[str]:
    """
    Derive search keywords from a question/answer pair.

    Lower-cases the joined text, takes every maximal run of word characters
    with at least three characters, and drops duplicates keeping the first
    occurrence. No stop words or stemming.

    Args:
        question: FAQ question text
        answer: FAQ answer text

    Returns:
        Ordered list of unique keywords

    Example:
        >>> derive_keywords("Where is the library?", "In the library building.")
        ['where', 'the', 'library', 'building']
    """
    text = f"{question} {answer}".lower()
    words = [w for w in _WORD_RE.findall(text) if len(w) >= MIN_KEYWORD_LENGTH]
    return list(dict.fromkeys(words))


def tokenize_query(query: str) -> List[str]:
    """
    Split a chatbot query into search terms.

    Lower-cases, splits on whitespace and drops terms of two characters or
    fewer. Punctuation stays attached to the term.

    Example:
        >>> tokenize_query("How do I apply?")
        ['how', 'apply?']
    """
    return [term for term in query.lower().split() if len(term) >= MIN_TERM_LENGTH]
