"""Shared helpers for VersaTools engines."""
