"""Packaged reference datasets."""
