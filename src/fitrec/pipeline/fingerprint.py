"""Deterministic cache keys for memoized pipeline outcomes."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

import orjson

from fitrec.pipeline.models import SubjectAttributes
from fitrec.shared.constants import CacheKeys


def normalize_categories(category_keys: Iterable[str]) -> list[str]:
    """Lower-case, strip, de-duplicate and sort category keys."""
    return sorted({key.strip().lower() for key in category_keys if key.strip()})


def attributes_fingerprint(attributes: SubjectAttributes) -> str:
    """SHA-256 hex digest of the attributes, insensitive to condition order."""
    payload = attributes.model_dump(mode="json")
    payload["health_conditions"] = sorted(
        {condition.lower() for condition in attributes.health_conditions}
    )
    return hashlib.sha256(orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)).hexdigest()


def subject_digest(subject_id: str) -> str:
    return hashlib.sha256(subject_id.encode("utf-8")).hexdigest()


def subject_prefix(subject_id: str) -> str:
    """Key prefix shared by every memoized outcome of one subject.

    The subject id is hashed to a fixed-length digest, so one subject's prefix
    is never a prefix of another's (``"u"`` vs ``"u:1"``) and raw ids stay
    out of cache keys.
    """
    return f"{CacheKeys.RECOMMENDATIONS}{subject_digest(subject_id)}{CacheKeys.SEPARATOR}"


def result_cache_key(
    subject_id: str,
    category_keys: Iterable[str],
    attributes: SubjectAttributes,
) -> str:
    """Key under which the outcome of ``run(subject_id, category_keys, attributes)`` is memoized.

    Requests differing only in category order, case or duplicates share a key.

    Example:
        >>> a = result_cache_key("u-1", ["Chest", "back"], SubjectAttributes())
        >>> b = result_cache_key("u-1", ["back", "chest", "chest"], SubjectAttributes())
        >>> a == b
        True
    """
    request = {
        "categories": normalize_categories(category_keys),
        "attributes": attributes_fingerprint(attributes),
    }
    digest = hashlib.sha256(orjson.dumps(request, option=orjson.OPT_SORT_KEYS)).hexdigest()
    return f"{subject_prefix(subject_id)}{digest}"


__all__ = [
    "attributes_fingerprint",
    "normalize_categories",
    "result_cache_key",
    "subject_digest",
    "subject_prefix",
]
