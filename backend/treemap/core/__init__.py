"""Configuration and logging setup shared by the whole backend."""
