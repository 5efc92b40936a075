"""HTTP API for the Mind pipeline."""
