"""HTTP API for the Echo feedback service."""
