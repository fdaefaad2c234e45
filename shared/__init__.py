"""Shared helpers (logging) used across BlobSync packages."""
