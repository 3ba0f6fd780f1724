from .commands import CLICommands

__all__ = ["CLICommands"]
