from skill_guard.tui.renderers import GuardConsoleUI

__all__ = ["GuardConsoleUI"]
