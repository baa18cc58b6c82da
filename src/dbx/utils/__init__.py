"""Utility helpers for dbx."""
