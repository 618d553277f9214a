"""Shared binary, text and file helpers."""
