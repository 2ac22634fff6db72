"""Developer and operator tooling."""
