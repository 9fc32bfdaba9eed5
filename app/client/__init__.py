"""
Client module - Python client for the portal API with a cached profile.
"""

from app.client.api_client import PortalApiError, PortalClient
from app.client.profile_cache import ProfileCache

__all__ = ["PortalApiError", "PortalClient", "ProfileCache"]
