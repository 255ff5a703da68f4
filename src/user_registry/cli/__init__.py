from .console import Action, UserConsole

__all__ = ["Action", "UserConsole"]
