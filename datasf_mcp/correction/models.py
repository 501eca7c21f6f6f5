"""
Data types shared by the schema cache, correction pipeline and error classifier.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ColumnInfo:
    """One dataset column. ``field_name`` is what SoQL queries must use."""
    name: str
    field_name: str
    data_type: str = "text"

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "fieldName": self.field_name, "dataType": self.data_type}


@dataclass(frozen=True)
class DatasetSchema:
    """Schema of a dataset as returned by the Views API."""
    columns: Tuple[ColumnInfo, ...]
    dataset_name: str
    row_count: int = 0

    def __post_init__(self):
        # Accept any sequence of columns but store an immutable tuple
        object.__setattr__(self, "columns", tuple(self.columns))
        if self.row_count < 0:
            raise ValueError(f"row_count must be >= 0, got {self.row_count}")

    @property
    def field_names(self) -> List[str]:
        return [column.field_name for column in self.columns]


@dataclass(frozen=True)
class CorrectionResult:
    """A proposed replacement of a query identifier with a schema field name."""
    original: str
    corrected: str
    was_changed: bool = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "was_changed", self.original != self.corrected)

    def to_dict(self) -> Dict[str, Any]:
        return {"original": self.original, "corrected": self.corrected, "wasChanged": self.was_changed}


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    API_ERROR = "api_error"


@dataclass(frozen=True)
class ClassifiedError:
    """A failed external call, normalized so the caller can adjust its request."""
    kind: ErrorKind
    message: str
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message, "error_type": self.kind.value}
        if self.details:
            payload["details"] = self.details
        return payload


@dataclass(frozen=True)
class RewriteResult:
    rewritten: str
    applied_corrections: Tuple[CorrectionResult, ...] = ()


@dataclass
class QueryOutcome:
    """Successful query result merged with the correction report."""
    records: List[Any]
    record_count: int
    truncated: bool
    corrections: List[CorrectionResult] = field(default_factory=list)
    # query actually executed; serialized only when corrections rewrote it
    query: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "data": self.records,
            "count": self.record_count,
            "truncated": self.truncated,
        }
        if self.corrections:
            payload["corrections"] = [c.to_dict() for c in self.corrections]
            if self.query is not None:
                payload["query"] = self.query
        return payload


@dataclass(frozen=True)
class SchemaLookup:
    schema: DatasetSchema
    cached: bool

    def to_dict(self, dataset_id: str) -> Dict[str, Any]:
        return {
            "dataset_id": dataset_id,
            "dataset_name": self.schema.dataset_name,
            "columns": [column.to_dict() for column in self.schema.columns],
            "row_count": self.schema.row_count,
            "cached": self.cached,
        }
