"""Configuration, errors, logging and time helpers."""
