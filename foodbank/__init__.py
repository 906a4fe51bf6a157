# foodbank/__init__.py
"""
Package init for the foodbank Django project.

Loads the Celery app so `shared_task` decorators bind to it when Django
starts (web process or worker).
"""

from __future__ import annotations

from .celery import app as celery_app

__all__ = ("celery_app",)
