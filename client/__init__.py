"""HTTP client for the postage backend."""

from client.api import ApiClient, ApiError  # noqa: F401
