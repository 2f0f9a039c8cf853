"""
Greet Service

A small quickstart REST service that reads and updates an in-memory greeting,
with request counting, health, metrics and optional tracing and authentication.
"""
__version__ = "1.0.0"
