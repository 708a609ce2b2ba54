"""
Priority detection for extracted tasks.
"""

import re
from typing import Optional

from dreamlist.domain.todo import Priority

URGENT_PATTERN = re.compile(
    r"\b(?:urgent(?:ly)?|asap|immediately|right\s+now|important|critical|emergency)\b|!",
    re.IGNORECASE,
)

DEFERRAL_PATTERN = re.compile(
    r"\b(?:when\s+you\s+have\s+time|eventually|sometime|maybe|later)\b",
    re.IGNORECASE,
)


def classify_priority(phrase: str, context: Optional[str] = None) -> Priority:
    """
    Classify a task phrase as high, medium or low priority.

    Urgency markers are checked before deferral markers, so a phrase that
    has both is high priority.

    Args:
        phrase: Extracted task phrase
        context: Optional full message the phrase came from. Emphasis such
            as a trailing "!" is stripped from the phrase, so it only shows
            up here.

    Returns:
        The detected priority (medium when no marker is present)
    """
    haystack = phrase if not context else f"{phrase}\n{context}"

    if URGENT_PATTERN.search(haystack):
        return Priority.HIGH
    if DEFERRAL_PATTERN.search(haystack):
        return Priority.LOW
    return Priority.MEDIUM
