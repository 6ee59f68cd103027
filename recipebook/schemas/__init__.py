"""Pydantic schemas for the request and response shapes exposed to callers."""
