"""
Proletariat CLI package.

Commands are auto-discovered from ``cli/commands``. Framework helpers:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _prompts: Interactive prompts turned into core callbacks
- _utils: Repository and context resolution
"""
from ._args import add_json_flag, add_repo_root_flag, add_standard_flags, add_yes_flag
from ._output import OutputFormatter
from ._utils import get_repo_root, load_context

__all__ = [
    "OutputFormatter",
    "add_json_flag",
    "add_repo_root_flag",
    "add_yes_flag",
    "add_standard_flags",
    "get_repo_root",
    "load_context",
]
