"""Free-text target resolution using Knuth-Morris-Pratt substring search."""

import logging
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


def build_failure_table(pattern: str) -> List[int]:
    """Longest proper prefix that is also a suffix, for each prefix of pattern."""
    table = [0] * len(pattern)
    length = 0
    i = 1
    while i < len(pattern):
        if pattern[i] == pattern[length]:
            length += 1
            table[i] = length
            i += 1
        elif length:
            length = table[length - 1]
        else:
            table[i] = 0
            i += 1
    return table


def kmp_search(text: str, pattern: str) -> bool:
    """True if pattern occurs contiguously in text. Empty pattern never matches."""
    if not text or not pattern:
        return False
    table = build_failure_table(pattern)
    j = 0
    for ch in text:
        while j and ch != pattern[j]:
            j = table[j - 1]
        if ch == pattern[j]:
            j += 1
            if j == len(pattern):
                return True
    return False


def resolve(descriptor: Optional[str], catalog: Sequence[str]) -> List[str]:
    """Catalog entries occurring verbatim in descriptor, in catalog order.

    Nested names (one candidate inside another) match independently. An empty
    result means "no match" and is not an error.
    """
    if not descriptor or not catalog:
        return []

    matched = []
    seen = set()
    for candidate in catalog:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if kmp_search(descriptor, candidate):
            matched.append(candidate)

    logger.debug("Resolved '%s' -> %s", descriptor, matched)
    return matched
