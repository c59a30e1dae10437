"""
Custom report module: user-authored report definitions executed against
the registered fleet data sources.

Usage:
    from fleet_reports.extensions.reporting import (
        definition_from_dict,
        validate_definition,
        registry,
        ReportValidationError,
    )
    from fleet_reports.extensions.reporting.engine import ReportExecutionEngine

    engine = ReportExecutionEngine(
        "assets", definition_from_dict(raw), organisation_id=org.pk
    )
    result = engine.execute(page=1, page_size=50)

Models, services and views are imported from their own modules so this
package stays importable before the app registry is ready.
"""

from .definition import definition_from_dict, definition_to_dict
from .registry import DataSourceRegistry, get_registry, registry
from .types import (
    Aggregation,
    AggregationType,
    ColumnMeta,
    DataSource,
    DateRange,
    FilterOperator,
    OrderBy,
    Pagination,
    QueryMode,
    ReportColumn,
    ReportDefinition,
    ReportExecutionError,
    ReportFilter,
    ReportingError,
    ReportNotFoundError,
    ReportResult,
    ReportValidationError,
    SemanticType,
    SortDirection,
    TenantRequiredError,
    UnknownDataSourceError,
    UnknownFieldError,
)
from .validation import validate_definition

__all__ = [
    "definition_from_dict",
    "definition_to_dict",
    "validate_definition",
    "DataSourceRegistry",
    "get_registry",
    "registry",
    "Aggregation",
    "AggregationType",
    "ColumnMeta",
    "DataSource",
    "DateRange",
    "FilterOperator",
    "OrderBy",
    "Pagination",
    "QueryMode",
    "ReportColumn",
    "ReportDefinition",
    "ReportExecutionError",
    "ReportFilter",
    "ReportingError",
    "ReportNotFoundError",
    "ReportResult",
    "ReportValidationError",
    "SemanticType",
    "SortDirection",
    "TenantRequiredError",
    "UnknownDataSourceError",
    "UnknownFieldError",
]
