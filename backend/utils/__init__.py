"""Backend utilities."""
