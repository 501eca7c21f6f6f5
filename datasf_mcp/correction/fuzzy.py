"""
Fuzzy column-name correction.

Scores each candidate against the schema's field names with a normalized
Levenshtein distance (0.0 identical, 1.0 nothing in common) and accepts the
closest field when it is within the threshold.
"""

from typing import List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from .models import CorrectionResult

DEFAULT_THRESHOLD = 0.4


def field_distance(candidate: str, field_name: str) -> float:
    """Case-insensitive normalized edit distance between two identifiers."""
    return Levenshtein.normalized_distance(candidate.lower(), field_name.lower())


class FuzzyCorrector:
    """Maps misspelled identifiers onto authoritative field names."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        """
        Args:
            threshold: Maximum accepted distance (0-1, lower is stricter)
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold}")
        self.threshold = threshold

    def best_match(self, candidate: str, valid_fields: Sequence[str]) -> Optional[Tuple[str, float]]:
        """
        Return the closest field and its distance, or None for an empty field list.

        Ties keep the field listed first. An exact match always wins.
        """
        if candidate in valid_fields:
            return candidate, 0.0

        best = None
        for field_name in valid_fields:
            score = field_distance(candidate, field_name)
            if best is None or score < best[1]:
                best = (field_name, score)
        return best

    def correct(self, candidates: Sequence[str], valid_fields: Sequence[str]) -> List[CorrectionResult]:
        """
        Correct each candidate against the valid field names.

        Returns one result per candidate in input order. Candidates with no
        field within the threshold pass through unchanged.
        """
        results = []
        for candidate in candidates:
            match = self.best_match(candidate, valid_fields)
            if match is not None and match[1] <= self.threshold:
                results.append(CorrectionResult(original=candidate, corrected=match[0]))
            else:
                results.append(CorrectionResult(original=candidate, corrected=candidate))
        return results
