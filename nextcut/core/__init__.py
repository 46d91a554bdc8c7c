"""Core constants, errors and helpers shared across layers."""
