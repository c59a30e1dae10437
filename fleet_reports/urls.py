"""
URL configuration for fleet-reports.

- REST endpoints for custom reports under ``api/``
- GraphQL endpoint at ``graphql/``
"""

from django.urls import include, path
from django.views.decorators.csrf import csrf_exempt
from graphene_django.views import GraphQLView

from .config_proxy import get_setting
from .extensions.auth.decorators import jwt_required

urlpatterns = [
    path("api/", include("fleet_reports.extensions.reporting.urls")),
    path(
        "graphql/",
        csrf_exempt(
            jwt_required(
                GraphQLView.as_view(
                    graphiql=bool(get_setting("graphql_settings.enable_graphiql", False))
                )
            )
        ),
        name="graphql",
    ),
]
