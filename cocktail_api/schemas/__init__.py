"""Pydantic request/response schemas (the API contract, camelCase on the wire)."""
