"""Configuration, logging, errors, persistence and indexing."""
