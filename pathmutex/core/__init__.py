"""Lock primitives, strategies, settings and runtime for pathmutex."""
