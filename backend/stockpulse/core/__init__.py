"""Core application primitives: exceptions and logging setup."""
