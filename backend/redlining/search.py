from __future__ import annotations

from dataclasses import dataclass

from redlining.types import GeoDataset, RedliningFeature


class InvalidKeywordError(ValueError):
    """Raised for a missing or blank search keyword."""


@dataclass(frozen=True)
class SearchResult:
    keyword: str
    matches: tuple[str, ...]

    @property
    def total(self) -> int:
        return len(self.matches)


def normalize_keyword(keyword: str | None) -> str:
    k = (keyword or "").strip().lower()
    if not k:
        raise InvalidKeywordError("Search keyword is required")
    return k


def search_features(dataset: GeoDataset, keyword: str | None) -> SearchResult:
    """
    Case-insensitive substring search over each feature's area description fields.

    Match ids are "<city>-<holc_grade>-<n>" where n is the 0-based position among the
    matches of this call. They are unique within one result but are not stable feature
    ids: the same area can get a different n for a different keyword.
    """
    k = normalize_keyword(keyword)
    matches: list[str] = []
    for feature in dataset.features:
        if _describes(feature, k):
            matches.append(
                f"{feature.city or ''}-{feature.holc_grade or ''}-{len(matches)}"
            )
    return SearchResult(keyword=k, matches=tuple(matches))


def _describes(feature: RedliningFeature, keyword: str) -> bool:
    for value in feature.description_fields.values():
        if value is not None and keyword in value.lower():
            return True
    return False
