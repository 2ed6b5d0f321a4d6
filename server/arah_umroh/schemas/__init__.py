"""Pydantic schemas for request/response validation.

Schemas are imported from their modules (``schemas.booking``,
``schemas.package`` ...); several modules define a request with the
same name, so nothing is re-exported here.
"""
