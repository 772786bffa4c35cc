"""Command implementations for the cmakebase CLI."""
