"""Normalization of delimited list values such as process name lists."""

from __future__ import annotations

from typing import Iterable, Sequence


class ListNormalizer:
    """Splits and deduplicates delimited values read from the environment."""

    @staticmethod
    def split_and_normalize(raw_value: str, separator: str) -> list[str]:
        """
        Split ``raw_value`` on ``separator`` and drop blank items.

        Items are stripped of surrounding whitespace only; case is preserved
        because process names are matched case-sensitively.
        """
        parts: Iterable[str] = raw_value.split(separator) if separator else [raw_value]
        return [item.strip() for item in parts if item.strip()]

    @staticmethod
    def deduplicate_preserving_order(items: Sequence[str]) -> tuple[str, ...]:
        """Remove duplicates while keeping the first occurrence of each item."""
        seen: set[str] = set()
        deduped: list[str] = []
        for item in items:
            if item in seen:
                continue
            seen.add(item)
            deduped.append(item)
        return tuple(deduped)
