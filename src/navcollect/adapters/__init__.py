"""Adapters connecting the collector to files on disk."""
