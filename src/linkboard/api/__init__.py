"""HTTP API for Linkboard."""
