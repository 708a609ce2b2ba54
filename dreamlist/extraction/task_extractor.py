"""
Pattern-based task extraction from conversational text.

No NLP here: an ordered list of regular expressions, most explicit phrasing
first. The first recognizer whose cleaned capture passes the length check
wins.
"""

import logging
import re
from typing import List, Optional, Pattern

logger = logging.getLogger(__name__)

MIN_TASK_LENGTH = 6
MAX_TASK_LENGTH = 199

TASK_PATTERNS: List[Pattern[str]] = [
    # "add a task to my todo list: ..."
    re.compile(
        r"\b(?:create|add|make)\s+(?:a\s+)?(?:new\s+)?task\s+(?:(?:to|on|in)\s+)?"
        r"(?:my\s+)?(?:(?:todo|to-do)\s+)?list[:\s]+(.+)",
        re.IGNORECASE,
    ),
    # "create a task to ..."
    re.compile(
        r"\b(?:create|add|make)\s+(?:a\s+)?(?:new\s+)?task\s+to\s+(.+)",
        re.IGNORECASE,
    ),
    # First-person intention
    re.compile(
        r"\b(?:remember\s+to|don['’]?t\s+forget\s+to|i(?:['’]ve|\s+have)\s+to|"
        r"i(?:['’]m|\s+am)\s+going\s+to|i\s+need\s+to|i\s+should|i\s+must)\s+(.+)",
        re.IGNORECASE,
    ),
    # Explicit labels
    re.compile(r"\b(?:todo|to-do|task):\s*(.+)", re.IGNORECASE),
    # Numbered list items, at the start of a line or after a sentence
    re.compile(r"(?:^|\.\s*)\d+\.\s+(.+)", re.MULTILINE),
]

_TRAILING_PUNCTUATION = re.compile(r"[.!?]+$")


def clean_task_text(raw: str) -> Optional[str]:
    """
    Normalize a captured phrase.

    Args:
        raw: Text captured by a recognizer

    Returns:
        Trimmed phrase without trailing sentence punctuation, or None if its
        length is outside the accepted range
    """
    task = _TRAILING_PUNCTUATION.sub("", raw.strip()).strip()
    if MIN_TASK_LENGTH <= len(task) <= MAX_TASK_LENGTH:
        return task
    return None


def extract_task(text: Optional[str]) -> Optional[str]:
    """
    Find a task phrase in a block of text.

    Args:
        text: Message content

    Returns:
        The normalized task phrase, or None if nothing task-like was found
    """
    if not text or not text.strip():
        return None

    for pattern in TASK_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        task = clean_task_text(match.group(1))
        if task:
            logger.debug(f"Extracted task {task!r} with pattern {pattern.pattern[:40]!r}")
            return task

    return None
