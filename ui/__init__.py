"""HTTP API package serving altaxis chart payloads."""
