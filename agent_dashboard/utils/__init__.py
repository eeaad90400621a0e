"""Shared utilities: caching, logging setup and async subprocess helpers."""
