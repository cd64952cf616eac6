"""Persistent session storage."""
