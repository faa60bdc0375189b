"""Core foundations shared across features (auth, security, HTTP glue)."""
