"""
Data classes, enums and exceptions for the custom report engine.

This module contains the core type definitions shared by the registry, the
validator and the execution engine: column metadata, the parsed report
definition, the result payload and the error taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class ReportingError(Exception):
    """Base class for every error raised by the report engine."""

    status_code = 500
    code = "REPORTING_ERROR"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, "details": self.details}


class ReportValidationError(ReportingError):
    """Raised when a report definition cannot be executed as written."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.field = field
        if code:
            self.code = code
        if field is not None:
            self.details.setdefault("field", field)


class UnknownDataSourceError(ReportValidationError):
    code = "UNKNOWN_DATA_SOURCE"


class UnknownFieldError(ReportValidationError):
    code = "UNKNOWN_FIELD"


class ReportExecutionError(ReportingError):
    """Raised when the data store fails while running a validated report."""

    status_code = 500
    code = "EXECUTION_ERROR"


class ReportNotFoundError(ReportingError):
    """Raised when a saved report is missing or not visible to the caller."""

    status_code = 404
    code = "NOT_FOUND"


class TenantRequiredError(ReportingError):
    """Raised when no organisation scope can be resolved for the caller."""

    status_code = 403
    code = "TENANT_REQUIRED"


class SemanticType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    UUID = "uuid"


class FilterOperator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    IN = "in"
    NOT_IN = "notIn"
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"


class AggregationType(str, Enum):
    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class QueryMode(str, Enum):
    PLAIN = "plain"
    SCALAR = "scalar"
    GROUPED = "grouped"


@dataclass(frozen=True)
class ColumnMeta:
    """Physical reference and semantic type of one reportable field."""

    field: str
    physical_ref: str
    semantic_type: SemanticType


@dataclass(frozen=True)
class DataSource:
    """One reportable table with its tenant column and column map."""

    name: str
    model_label: str
    tenant_column: str
    columns: Mapping[str, ColumnMeta]
    label: str = ""

    def get_column(self, field_name: str) -> Optional[ColumnMeta]:
        return self.columns.get(field_name)

    def has_column(self, field_name: str) -> bool:
        return field_name in self.columns


@dataclass
class ReportColumn:
    field: str
    order: int = 0
    label: Optional[str] = None
    visible: bool = True


@dataclass
class ReportFilter:
    """
    One user filter.

    ``has_value`` distinguishes an omitted ``value`` key from an explicit
    ``null``: ``eq``/``neq`` compile ``null`` into a null check.
    """

    field: str
    operator: FilterOperator
    value: Any = None
    has_value: bool = False


@dataclass
class DateRange:
    field: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass
class Aggregation:
    field: str
    type: AggregationType
    alias: Optional[str] = None

    @property
    def output_name(self) -> str:
        return self.alias or f"{self.type.value}_{self.field}"


@dataclass
class OrderBy:
    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass
class ReportDefinition:
    """Declarative report definition persisted as JSON."""

    columns: list[ReportColumn] = field(default_factory=list)
    filters: list[ReportFilter] = field(default_factory=list)
    date_range: Optional[DateRange] = None
    group_by: Optional[list[str]] = None
    aggregations: Optional[list[Aggregation]] = None
    order_by: Optional[OrderBy] = None
    limit: Optional[int] = None

    @property
    def visible_columns(self) -> list[ReportColumn]:
        visible = [column for column in self.columns if column.visible]
        return sorted(visible, key=lambda column: column.order)

    @property
    def has_aggregations(self) -> bool:
        return bool(self.aggregations)

    @property
    def has_group_by(self) -> bool:
        return bool(self.group_by)


@dataclass
class Pagination:
    page: int
    page_size: int
    total: int
    total_pages: int

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass
class ReportResult:
    data: list[dict[str, Any]]
    pagination: Pagination
    columns: list[dict[str, str]]
    mode: QueryMode = QueryMode.PLAIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "pagination": self.pagination.to_dict(),
            "columns": self.columns,
        }


# Aggregations allowed per column type; count accepts anything.
AGGREGATION_COMPATIBILITY: dict[AggregationType, set[SemanticType]] = {
    AggregationType.COUNT: set(SemanticType),
    AggregationType.SUM: {SemanticType.NUMBER},
    AggregationType.AVG: {SemanticType.NUMBER},
    AggregationType.MIN: {SemanticType.NUMBER, SemanticType.DATE},
    AggregationType.MAX: {SemanticType.NUMBER, SemanticType.DATE},
}

COMPARISON_OPERATORS = {
    FilterOperator.GT,
    FilterOperator.GTE,
    FilterOperator.LT,
    FilterOperator.LTE,
}

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500
MAX_DEFINITION_LIMIT = 10_000


__all__ = [
    "ReportingError",
    "ReportValidationError",
    "UnknownDataSourceError",
    "UnknownFieldError",
    "ReportExecutionError",
    "ReportNotFoundError",
    "TenantRequiredError",
    "SemanticType",
    "FilterOperator",
    "AggregationType",
    "SortDirection",
    "QueryMode",
    "ColumnMeta",
    "DataSource",
    "ReportColumn",
    "ReportFilter",
    "DateRange",
    "Aggregation",
    "OrderBy",
    "ReportDefinition",
    "Pagination",
    "ReportResult",
    "AGGREGATION_COMPATIBILITY",
    "COMPARISON_OPERATORS",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MAX_DEFINITION_LIMIT",
]
