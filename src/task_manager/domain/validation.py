"""
Field validation helpers.

Every check returns None when the value is acceptable, or a short reason
that can be shown to the caller as-is.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence


def is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def check_required(field: str, value: Optional[str]) -> Optional[str]:
    if is_blank(value):
        return f"{field} is required"
    return None


def check_length(field: str, value: Optional[str], min_len: int, max_len: int) -> Optional[str]:
    # max_len == 0 means no upper bound
    length = len((value or "").strip())
    if length < min_len:
        return f"{field} must be at least {min_len} characters"
    if max_len > 0 and length > max_len:
        return f"{field} must be no more than {max_len} characters"
    return None


def check_one_of(field: str, value: str, allowed: Iterable[str]) -> Optional[str]:
    allowed = list(allowed)
    if value not in allowed:
        return f"{field} must be one of: {', '.join(allowed)}"
    return None


def check_tags(tags: Optional[Sequence[str]], max_tags: int, max_len: int) -> Optional[str]:
    if not tags:
        return None
    if len(tags) > max_tags:
        return f"maximum of {max_tags} tags allowed"
    for i, tag in enumerate(tags, start=1):
        tag = (tag or "").strip()
        if not tag:
            return f"tag {i} is empty"
        if len(tag) > max_len:
            return f"tag '{tag}' exceeds maximum length of {max_len} characters"
    return None
