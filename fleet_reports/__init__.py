"""
fleet-reports: custom report builder for multi-tenant fleet operations.

The package ships a Django app exposing a declarative report engine over a
fixed set of fleet data sources (assets, work orders, maintenance schedules,
fuel transactions, inspections).
"""

__version__ = "0.1.0"
