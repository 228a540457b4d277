"""Use cases called by the CLI."""
