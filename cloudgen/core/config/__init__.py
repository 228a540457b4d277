"""Build request loading and generation options."""
