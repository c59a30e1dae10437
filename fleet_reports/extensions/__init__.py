"""
Extensions for fleet-reports: authentication, multitenancy and reporting.
"""
