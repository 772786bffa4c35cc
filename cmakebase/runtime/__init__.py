"""Configuration-time runtime: cache, context, loading and the configure run."""
