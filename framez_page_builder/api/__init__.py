"""Remote session API client."""

from .session_client import SessionAPIClient, TransientAPIError, find_namespace_name

__all__ = [
    "SessionAPIClient",
    "TransientAPIError",
    "find_namespace_name"
]
