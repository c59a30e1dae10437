"""
GraphQL schema for custom reports.
"""

from typing import Any, Optional

import graphene
from graphene.types.generic import GenericScalar
from graphql import GraphQLError

from ..multitenancy.resolver import require_tenant_id
from . import services
from .filters import CustomReportFilter
from .types import ReportingError
from .utils import _json_sanitize


def _graphql_error(exc: ReportingError) -> GraphQLError:
    return GraphQLError(
        exc.message,
        extensions={
            "code": exc.code,
            "status": exc.status_code,
            "details": _json_sanitize(exc.details),
        },
    )


def _caller(info) -> tuple[Any, Any]:
    request = info.context
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        raise GraphQLError(
            "Authentication required", extensions={"code": "UNAUTHENTICATED"}
        )
    try:
        return user, require_tenant_id(request)
    except ReportingError as exc:
        raise _graphql_error(exc) from exc


class CustomReportType(graphene.ObjectType):
    id = graphene.ID(required=True)
    name = graphene.String(required=True)
    description = graphene.String()
    data_source = graphene.String(required=True)
    definition = GenericScalar()
    is_shared = graphene.Boolean()
    is_archived = graphene.Boolean()
    owner_id = graphene.ID()
    last_run_at = graphene.DateTime()
    created_at = graphene.DateTime()
    updated_at = graphene.DateTime()

    class Meta:
        name = "CustomReport"


class DataSourceColumnType(graphene.ObjectType):
    field = graphene.String(required=True)
    type = graphene.String(required=True)

    class Meta:
        name = "ReportDataSourceColumn"


class DataSourceType(graphene.ObjectType):
    name = graphene.String(required=True)
    label = graphene.String()
    columns = graphene.List(DataSourceColumnType)

    class Meta:
        name = "ReportDataSource"


class ReportQuery(graphene.ObjectType):
    custom_reports = graphene.List(
        CustomReportType,
        data_source=graphene.String(required=False),
        is_shared=graphene.Boolean(required=False),
        search=graphene.String(required=False),
    )
    custom_report = graphene.Field(CustomReportType, id=graphene.ID(required=True))
    report_data_sources = graphene.List(DataSourceType)
    execute_custom_report = graphene.Field(
        GenericScalar,
        data_source=graphene.String(required=True),
        definition=GenericScalar(required=True),
        page=graphene.Int(required=False),
        page_size=graphene.Int(required=False),
        report_id=graphene.ID(required=False),
    )

    @staticmethod
    def resolve_custom_reports(
        root,
        info,
        data_source: Optional[str] = None,
        is_shared: Optional[bool] = None,
        search: Optional[str] = None,
    ):
        user, organisation_id = _caller(info)
        queryset = services.visible_reports(user=user, organisation_id=organisation_id)
        data = {}
        if data_source:
            data["dataSource"] = data_source
        if is_shared is not None:
            data["isShared"] = "true" if is_shared else "false"
        if search:
            data["search"] = search
        report_filter = CustomReportFilter(data, queryset=queryset)
        if not report_filter.is_valid():
            raise GraphQLError(
                "Invalid list filters",
                extensions={
                    "code": "INVALID_FILTERS",
                    "details": report_filter.errors.get_json_data(),
                },
            )
        return list(report_filter.qs)

    @staticmethod
    def resolve_custom_report(root, info, id: str):
        user, organisation_id = _caller(info)
        try:
            return services.get_report(
                user=user, organisation_id=organisation_id, report_id=id
            )
        except ReportingError as exc:
            raise _graphql_error(exc) from exc

    @staticmethod
    def resolve_report_data_sources(root, info):
        _caller(info)
        return services.describe_data_sources()

    @staticmethod
    def resolve_execute_custom_report(
        root,
        info,
        data_source: str,
        definition: Any,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        report_id: Optional[str] = None,
    ):
        user, organisation_id = _caller(info)
        try:
            result = services.execute_report(
                user=user,
                organisation_id=organisation_id,
                data_source=data_source,
                definition=definition,
                page=page,
                page_size=page_size,
                report_id=report_id,
            )
        except ReportingError as exc:
            raise _graphql_error(exc) from exc
        return result.to_dict()


class Query(ReportQuery, graphene.ObjectType):
    pass


schema = graphene.Schema(query=Query)


__all__ = ["ReportQuery", "Query", "schema"]
