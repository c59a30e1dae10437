"""
URL routes for the custom report endpoints.
"""

from django.urls import path

from .views import (
    CustomReportDetailView,
    CustomReportExecuteView,
    CustomReportListView,
    DataSourceListView,
)

urlpatterns = [
    path(
        "reports/custom/execute/",
        CustomReportExecuteView.as_view(),
        name="custom-report-execute",
    ),
    path("reports/custom/", CustomReportListView.as_view(), name="custom-report-list"),
    path(
        "reports/custom/<uuid:report_id>/",
        CustomReportDetailView.as_view(),
        name="custom-report-detail",
    ),
    path(
        "reports/data-sources/",
        DataSourceListView.as_view(),
        name="report-data-sources",
    ),
]
