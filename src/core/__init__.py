"""Core utilities shared across jsonform modules."""
