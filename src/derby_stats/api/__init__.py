"""
HTTP API for Derby Stats.

The ASGI application is derby_stats.api.main:app.
"""
