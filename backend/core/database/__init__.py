"""Database module"""
from .models import Base, Message
from .connection import get_db, init_db, create_tables
from .repository import MessageRepository

__all__ = [
    'Base',
    'Message',
    'MessageRepository',
    'get_db',
    'init_db',
    'create_tables',
]
