"""
Remote API access.

This subpackage wraps the GET endpoints of the media API behind a small
client that enforces the configured timeout and maps transport and decoding
failures to importer errors.
"""

from .api_client import RemoteApiClient

__all__ = ["RemoteApiClient"]
