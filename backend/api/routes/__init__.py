"""
API Routes
"""
from backend.api.routes import messages, integrity

__all__ = ["messages", "integrity"]
