"""
Shared fixtures for the fleet-reports test suite.
"""

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from fleet_reports.extensions.auth import JWTManager
from fleet_reports.fleet.models import Asset, Organisation, OrganisationMember


@pytest.fixture
def organisation(db):
    return Organisation.objects.create(name="Northwind Haulage")


@pytest.fixture
def other_organisation(db):
    return Organisation.objects.create(name="Southgate Logistics")


def _member(username, organisation, role="manager"):
    user = get_user_model().objects.create_user(
        username=username, password="pass12345"
    )
    OrganisationMember.objects.create(user=user, organisation=organisation, role=role)
    return user


@pytest.fixture
def user(organisation):
    return _member("fleet_manager", organisation)


@pytest.fixture
def colleague(organisation):
    return _member("fleet_colleague", organisation, role="viewer")


@pytest.fixture
def outsider(other_organisation):
    return _member("other_manager", other_organisation)


@pytest.fixture
def auth_header(user, organisation):
    token = JWTManager.generate_token(user, organisation_id=organisation.pk)["token"]
    return {"HTTP_AUTHORIZATION": f"Bearer {token}"}


def make_asset(organisation, number, **kwargs):
    kwargs.setdefault("status", "active")
    return Asset.objects.create(organisation=organisation, asset_number=number, **kwargs)


@pytest.fixture
def five_assets(organisation):
    """Three active and two inactive assets with distinct mileage."""
    specs = [
        ("A-001", "active", Decimal("100.50"), 2019),
        ("A-002", "active", Decimal("200.25"), 2020),
        ("A-003", "active", None, 2021),
        ("A-004", "inactive", Decimal("50.00"), 2018),
        ("A-005", "inactive", Decimal("75.00"), None),
    ]
    return [
        make_asset(
            organisation,
            number,
            status=status,
            mileage=mileage,
            year=year,
            make="Volvo" if index % 2 == 0 else "Scania",
        )
        for index, (number, status, mileage, year) in enumerate(specs)
    ]


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)
