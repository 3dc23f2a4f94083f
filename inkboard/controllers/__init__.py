"""
Application controllers for managing interactions between UI and core logic.
"""
from .edit_controller import EditController

__all__ = [
    'EditController'
]
