"""
Correction orchestrator

Runs one query request end to end: resolve the dataset schema through the
cache, correct column names in the query, execute it, and merge the
correction report with the result.
"""

from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from datasf_mcp.logging import correction_logger, schema_logger, preview
from datasf_mcp.telemetry.metrics import record_corrections

from .cache import SchemaCache
from .config import CorrectionConfig
from .errors import handle_api_call
from .extractor import extract_identifiers
from .fuzzy import FuzzyCorrector
from .models import ClassifiedError, CorrectionResult, DatasetSchema, QueryOutcome, SchemaLookup
from .rewriter import rewrite_query

SchemaFetcher = Callable[[str], Awaitable[DatasetSchema]]
QueryExecutor = Callable[[str, str], Awaitable[Sequence[Any]]]


class CorrectionOrchestrator:
    """
    Use-case controller behind the query and schema tools.

    Args:
        cache: Shared schema cache, owned by the caller
        fetch_schema: Coroutine function returning the schema for a dataset id
        execute_query: Coroutine function running a query against a dataset
        config: Threshold, record limit and timeout settings
    """

    def __init__(
        self,
        cache: SchemaCache,
        fetch_schema: SchemaFetcher,
        execute_query: QueryExecutor,
        config: Optional[CorrectionConfig] = None
    ):
        self.cache = cache
        self.config = config or CorrectionConfig()
        self.corrector = FuzzyCorrector(self.config.fuzzy_threshold)
        self._fetch_schema = fetch_schema
        self._execute_query = execute_query

    async def resolve_schema(self, dataset_id: str) -> Union[SchemaLookup, ClassifiedError]:
        """Return the dataset schema from the cache, fetching and caching it on a miss."""
        cached = self.cache.get(dataset_id)
        if cached is not None:
            schema_logger.debug(f"schema cache hit | dataset:{dataset_id}")
            return SchemaLookup(schema=cached, cached=True)

        schema_logger.info(f"schema cache miss | dataset:{dataset_id}")
        result = await handle_api_call(
            lambda: self._fetch_schema(dataset_id),
            timeout=self.config.timeout_seconds,
            operation="fetch_schema"
        )
        if isinstance(result, ClassifiedError):
            return result

        self.cache.set(dataset_id, result)
        return SchemaLookup(schema=result, cached=False)

    async def _schema_for_correction(self, dataset_id: str) -> Optional[DatasetSchema]:
        # Any lookup failure disables correction for this request only
        try:
            lookup = await self.resolve_schema(dataset_id)
        except Exception as e:
            correction_logger.warning(
                f"skipping auto-correct | dataset:{dataset_id} | schema lookup failed:{type(e).__name__}: {e}"
            )
            return None

        if isinstance(lookup, ClassifiedError):
            correction_logger.warning(
                f"skipping auto-correct | dataset:{dataset_id} | schema error:{lookup.kind.value}"
            )
            return None
        return lookup.schema

    def correct_query(self, query: str, valid_fields: Sequence[str]) -> Tuple[str, List[CorrectionResult]]:
        """Rewrite misspelled field names in a query. Returns the query and the changes applied."""
        candidates = extract_identifiers(query)
        corrections = self.corrector.correct(candidates, valid_fields)
        result = rewrite_query(query, corrections)
        return result.rewritten, list(result.applied_corrections)

    async def run_query(
        self,
        dataset_id: str,
        raw_query: str,
        auto_correct: bool = True
    ) -> Union[QueryOutcome, ClassifiedError]:
        """
        Execute a query, auto-correcting column names first when requested.

        A schema lookup failure only disables correction; the query still runs
        as written. A query execution failure is returned as a ClassifiedError.
        """
        query = raw_query
        corrections: List[CorrectionResult] = []

        if auto_correct:
            schema = await self._schema_for_correction(dataset_id)
            if schema is not None:
                query, corrections = self.correct_query(raw_query, schema.field_names)
                if corrections:
                    summary = ", ".join(f"{c.original}->{c.corrected}" for c in corrections)
                    correction_logger.info(f"corrected query | dataset:{dataset_id} | changes:{summary}")
                    record_corrections(dataset_id, len(corrections))

        correction_logger.debug(f"executing | dataset:{dataset_id} | query:'{preview(query)}'")
        result = await handle_api_call(
            lambda: self._execute_query(dataset_id, query),
            timeout=self.config.timeout_seconds,
            operation="execute_query"
        )
        if isinstance(result, ClassifiedError):
            return result

        records = list(result)
        truncated = len(records) > self.config.max_records
        if truncated:
            records = records[:self.config.max_records]

        return QueryOutcome(
            records=records,
            record_count=len(records),
            truncated=truncated,
            corrections=corrections,
            query=query
        )
