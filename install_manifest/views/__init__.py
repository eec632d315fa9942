"""
Views - Qt widgets and UI components.

Views handle presentation only - no business logic.
"""

from .dialogs import InstallDialog

__all__ = [
    "InstallDialog",
]
