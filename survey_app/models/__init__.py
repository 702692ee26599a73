"""Pydantic records for surveys and responses."""
