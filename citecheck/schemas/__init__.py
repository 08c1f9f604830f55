"""Pydantic schemas: registry documents and API bodies."""
