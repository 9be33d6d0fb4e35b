"""Shared CLI helpers: options, error handling and setup."""
