"""Shared building blocks: errors, logging, constants, models and protocols."""
