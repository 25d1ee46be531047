"""Tenancy module - organizations, membership resolution and the active org.

Every tenant-scoped query filters on the resolved org_id explicitly.
Records in other organizations answer 404, not 403.
"""
