"""HTTP API for WagerLab."""
