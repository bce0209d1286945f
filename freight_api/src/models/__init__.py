"""Data models for the freight API.

This package contains Pydantic models for request validation and the
helpers that turn them into (and back from) MongoDB documents.
"""
