"""Configuration, dependencies and errors."""
