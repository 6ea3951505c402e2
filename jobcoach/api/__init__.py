"""
API routers package.
"""
from jobcoach.api import health, resume

__all__ = ["health", "resume"]
