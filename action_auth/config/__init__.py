"""Configuration package exports."""

from .model import TokenSettings

__all__ = ["TokenSettings"]
