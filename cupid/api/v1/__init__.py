"""
API v1 package.

Contains versioned API routes for the cupid registration and matching API.
"""

from cupid.api.v1.routes import router

__all__ = ["router"]
