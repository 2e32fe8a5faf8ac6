"""Core primitives: errors, logging, protocols and configuration."""
