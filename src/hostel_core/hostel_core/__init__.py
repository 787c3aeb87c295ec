"""Hostel/PG management core.

Feature modules (identity, tenancy, attendance, leaves, ...) hold the service
and repository layers; a thin Flask controller layer sits on top.
"""
