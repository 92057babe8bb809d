"""Packaged field catalog data."""
