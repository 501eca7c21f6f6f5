"""
Query rewriting from accepted corrections.
"""

import re
from typing import Dict, List, Sequence

from .models import CorrectionResult, RewriteResult


def _select_corrections(corrections: Sequence[CorrectionResult]) -> List[CorrectionResult]:
    """
    Keep changed corrections that can be applied without chaining.

    The first correction for a given original wins, and an original that is
    also the target of another correction is left alone, so a second rewrite
    pass over the output has nothing left to replace.
    """
    changed = [c for c in corrections if c.was_changed]
    targets = {c.corrected for c in changed}

    selected: Dict[str, CorrectionResult] = {}
    for correction in changed:
        if correction.original in targets or correction.original in selected:
            continue
        selected[correction.original] = correction
    return list(selected.values())


def rewrite_query(query: str, corrections: Sequence[CorrectionResult]) -> RewriteResult:
    """
    Replace whole-identifier occurrences of each corrected name.

    All replacements happen in a single pass, so a substituted name is never
    itself substituted again. Substrings of longer identifiers are untouched.
    """
    selected = _select_corrections(corrections)
    if not selected:
        return RewriteResult(rewritten=query)

    replacements = {c.original: c.corrected for c in selected}
    # Longest first so the alternation prefers full identifiers
    alternation = "|".join(re.escape(name) for name in sorted(replacements, key=len, reverse=True))
    pattern = re.compile(rf'(?<![A-Za-z0-9_])(?:{alternation})(?![A-Za-z0-9_])')

    used = set()

    def substitute(match: re.Match) -> str:
        used.add(match.group(0))
        return replacements[match.group(0)]

    rewritten = pattern.sub(substitute, query)
    applied = tuple(c for c in selected if c.original in used)
    return RewriteResult(rewritten=rewritten, applied_corrections=applied)
