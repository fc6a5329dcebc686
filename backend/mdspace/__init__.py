"""mdspace: per-user markdown workspaces with Claude Code chat."""

__version__ = "0.1.0"
