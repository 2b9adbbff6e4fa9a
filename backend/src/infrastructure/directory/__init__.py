"""Platform directory adapters (lesson catalog, user roles)."""

from .http_directory_client import HttpDirectoryClient

__all__ = ["HttpDirectoryClient"]
