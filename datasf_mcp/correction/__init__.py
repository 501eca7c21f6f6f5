"""
Schema-cache-backed query correction

Caches dataset schemas, fixes misspelled column names in SoQL queries and
classifies failures of the calls around them.
"""

from .cache import SchemaCache, CacheEntry
from .config import CorrectionConfig
from .errors import classify_error, handle_api_call
from .extractor import extract_identifiers, RESERVED_WORDS
from .fuzzy import FuzzyCorrector, field_distance
from .models import (
    ColumnInfo,
    DatasetSchema,
    CorrectionResult,
    ClassifiedError,
    ErrorKind,
    RewriteResult,
    QueryOutcome,
    SchemaLookup
)
from .orchestrator import CorrectionOrchestrator
from .rewriter import rewrite_query

__all__ = [
    # Cache
    'SchemaCache',
    'CacheEntry',

    # Pipeline
    'extract_identifiers',
    'RESERVED_WORDS',
    'FuzzyCorrector',
    'field_distance',
    'rewrite_query',
    'CorrectionOrchestrator',
    'CorrectionConfig',

    # Errors
    'classify_error',
    'handle_api_call',

    # Types
    'ColumnInfo',
    'DatasetSchema',
    'CorrectionResult',
    'ClassifiedError',
    'ErrorKind',
    'RewriteResult',
    'QueryOutcome',
    'SchemaLookup'
]
