"""HTTP surface of the remote site bridge."""
