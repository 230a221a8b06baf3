"""Core infrastructure: exceptions and logging."""
