"""
Focus Tasks Web Module

REST API endpoints for task management.
"""

from .server import app, create_app, start_server

__all__ = ['app', 'create_app', 'start_server']
