"""Utility helpers for cortical-q."""
