"""
GUI components for the companion client.
"""

from client.gui.main_window import GameWindow

__all__ = ["GameWindow"]
