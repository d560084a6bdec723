"""Top-level prlt commands (one module per command)."""
