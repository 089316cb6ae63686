"""Mini README: Interactive interfaces for Fieldbot.

Exports the FastAPI application factory that powers the operator control
centre. Future interface modules should live alongside this module.
"""

from .web_app import create_application

__all__ = ["create_application"]
