"""Shared helpers: errors, logging and archive limits."""
