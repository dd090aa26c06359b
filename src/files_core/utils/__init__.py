"""Shared helpers for files_core."""
