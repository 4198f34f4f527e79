"""Infrastructure adapters - Implementations of the domain ports."""
