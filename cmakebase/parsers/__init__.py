"""Parsers for the configuration file formats cmakebase reads."""
