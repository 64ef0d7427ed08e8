"""Shared utilities: logging, configuration, errors and the UTC clock."""
