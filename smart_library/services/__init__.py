"""Smart Library - Services Package

This package contains service modules for talking to the catalog API:
- HTTP client for the /api/books endpoints
"""
