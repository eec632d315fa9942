"""
Modal dialog components.
"""

from .install_dialog import InstallDialog

__all__ = [
    "InstallDialog",
]
