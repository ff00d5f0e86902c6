"""Vendor Trust Engine - API Routers"""
from .auth import router as auth_router
from .trust import router as trust_router
from .admin import router as admin_router

__all__ = [
    "auth_router",
    "trust_router",
    "admin_router",
]
