"""Configuration checking, packet building and protocol helpers for a stateful network load generator."""

__version__ = "1.6.0.dev0"