"""Operational scripts for local development."""
