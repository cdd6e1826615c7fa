"""Reporting helpers for agent sessions."""
