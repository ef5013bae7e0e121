"""
Core models package
"""

from .user_info.user import User
from .location import Location
from .supply.item import Item

__all__ = [
    'User',
    'Location',
    'Item',
]
