"""Command-line interface for redcap-client."""
