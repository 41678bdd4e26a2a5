"""Core domain models, configuration and errors."""
