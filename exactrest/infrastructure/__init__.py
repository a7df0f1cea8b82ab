"""Infrastructure layer: network IO against the remote API."""
