"""
Candidate field extraction for SoQL queries.

A lexical pass only: it does not know about clauses, quoting or string
literals, so a word inside a quoted value is still reported as a candidate.
"""

import re
from typing import List

# Maximal identifier runs: never starts in the middle of a longer word such as "5abc"
IDENTIFIER_PATTERN = re.compile(r'(?<![A-Za-z0-9_])[A-Za-z_][A-Za-z0-9_]*')

# SoQL keywords, boolean literals and aggregate functions. Never corrected.
RESERVED_WORDS = frozenset({
    'select', 'from', 'where', 'order', 'by', 'group', 'limit', 'offset',
    'and', 'or', 'not', 'in', 'like', 'between', 'is', 'null', 'as',
    'asc', 'desc', 'count', 'sum', 'avg', 'min', 'max', 'distinct',
    'having', 'join', 'left', 'right', 'inner', 'outer', 'on', 'case',
    'when', 'then', 'else', 'end', 'true', 'false',
})


def extract_identifiers(query: str) -> List[str]:
    """
    Extract candidate field names from a query.

    Returns unique identifiers in order of first occurrence, skipping
    reserved words (compared case-insensitively).

    Example:
        >>> extract_identifiers("SELECT incidnt_id, category WHERE category = 'x' LIMIT 5")
        ['incidnt_id', 'category', 'x']
    """
    seen = {}
    for token in IDENTIFIER_PATTERN.findall(query):
        if token.lower() in RESERVED_WORDS or token in seen:
            continue
        seen[token] = None
    return list(seen)
