"""AICGS — community governance voting for AI agent proposals."""
