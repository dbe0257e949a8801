"""
Short-text normalization for AI-suggested tile labels.

Raw labels from the shortening provider are trimmed, capitalized and made
unique within their batch before they are attached to topics.
"""

from typing import List, Sequence, Set

from ..models import Topic
from ..utils.parsing import TextParser
from .errors import MalformedResponseError

# Disambiguator suffixes run from 2 up to (not including) this bound
MAX_SUFFIX = 100


def _disambiguate(label: str, used: Set[str]) -> str:
    if label not in used:
        return label
    for suffix in range(2, MAX_SUFFIX):
        candidate = f"{label} {suffix}"
        if candidate not in used:
            return candidate
    raise MalformedResponseError(f"Too many duplicates of short topic '{label}'")


def normalize_short_labels(candidates: Sequence[str], expected_count: int) -> List[str]:
    """
    Normalize a batch of raw short labels.

    Args:
        candidates: Raw labels, positionally aligned with the source topics
        expected_count: Number of topics the batch was requested for

    Returns:
        Trimmed, capitalized, batch-unique labels in input order

    Raises:
        MalformedResponseError: On a count mismatch, an empty label, or
            when no free disambiguator below 100 exists
    """
    if len(candidates) != expected_count:
        raise MalformedResponseError(
            f"Expected {expected_count} short topics, got {len(candidates)}"
        )

    used: Set[str] = set()
    results: List[str] = []
    for raw in candidates:
        trimmed = TextParser.normalize_unicode(raw).strip()
        if not trimmed:
            raise MalformedResponseError("The AI service returned an empty short topic")

        label = _disambiguate(TextParser.capitalize_first_alnum(trimmed), used)
        used.add(label)
        results.append(label)

    return results


def apply_short_labels(topics: Sequence[Topic], candidates: Sequence[str]) -> List[Topic]:
    """
    Attach normalized labels to copies of ``topics``.

    The input topics are never modified; on error nothing is returned and
    the caller keeps its originals.
    """
    labels = normalize_short_labels(candidates, len(topics))
    return [topic.copy(short_text=label) for topic, label in zip(topics, labels)]
