# core/name_matcher.py
import math
import re
from typing import List, Optional
from model.certificate import MatchMethod, NameMatchResult

_NON_LETTERS = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")

SIMILARITY_THRESHOLD = 70


def normalize_name(name: Optional[str]) -> str:
    """
    Lowercase, keep only a-z and whitespace, collapse whitespace, trim.
    "Dr. Jean-Luc  O'Neil" -> "dr jeanluc oneil"
    """
    if not name:
        return ""
    cleaned = _NON_LETTERS.sub("", name.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def _tokens(normalized: str) -> List[str]:
    return [t for t in normalized.split(" ") if t]


def _overlap_confidence(n1: str, n2: str) -> int:
    # Bag-style: counts characters of the shorter string that occur anywhere in
    # the longer one. Order-insensitive; on equal length n2 is the "longer".
    longer, shorter = (n1, n2) if len(n1) > len(n2) else (n2, n1)
    matches = sum(1 for ch in shorter if ch in longer)
    return math.floor(matches / len(longer) * 100 + 0.5)


def compare_names(name1: Optional[str], name2: Optional[str]) -> NameMatchResult:
    """
    Compare an expected name with the name read off a certificate.

    First rule that applies wins:
      missing                -> no match, 0
      exact                  -> 100
      parts_match_any_order  -> 95  (both have >= 2 tokens, one token set covers the other)
      substring              -> 85
      character_similarity   -> overlap %, match when >= 70
    """
    n1 = normalize_name(name1)
    n2 = normalize_name(name2)

    if not n1 or not n2:
        return NameMatchResult(match=False, confidence=0, method=MatchMethod.missing)

    if n1 == n2:
        return NameMatchResult(match=True, confidence=100, method=MatchMethod.exact)

    parts1 = _tokens(n1)
    parts2 = _tokens(n2)
    if len(parts1) >= 2 and len(parts2) >= 2:
        if all(p in parts2 for p in parts1) or all(p in parts1 for p in parts2):
            return NameMatchResult(
                match=True, confidence=95, method=MatchMethod.parts_match_any_order
            )

    if n1 in n2 or n2 in n1:
        return NameMatchResult(match=True, confidence=85, method=MatchMethod.substring)

    confidence = _overlap_confidence(n1, n2)
    return NameMatchResult(
        match=confidence >= SIMILARITY_THRESHOLD,
        confidence=confidence,
        method=MatchMethod.character_similarity,
    )
