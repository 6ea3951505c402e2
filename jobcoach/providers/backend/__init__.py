"""
Job/interview backend client package.
"""
from jobcoach.providers.backend.client import BackendClient, get_backend_client

__all__ = [
    "BackendClient",
    "get_backend_client",
]
