"""Configuration for the bookstore API."""

from .settings import DatabaseConfig

__all__ = ["DatabaseConfig"]
