"""Car rental marketplace backend."""
