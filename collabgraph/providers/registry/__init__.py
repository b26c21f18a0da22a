"""Subject registry / durable graph store adapters."""
