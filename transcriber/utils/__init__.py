"""Shared utilities: retry helpers and the exception hierarchy."""
