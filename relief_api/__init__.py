"""
Backend package for the relief coordination API.

This package provides a FastAPI application with database, media and auth
abstractions for the supplies, volunteer and community features of the
frontend.
"""
