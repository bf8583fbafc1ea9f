"""
API v1 package.

Contains versioned API routes for registration and authentication.
"""

from otpgate.api.v1.routes import router

__all__ = ["router"]
