"""HTTP API for the content engine."""
