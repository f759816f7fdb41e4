"""Pydantic schemas: request bodies and snapshot views."""
