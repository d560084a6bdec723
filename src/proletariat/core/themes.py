"""Theme reference table.

Themes are immutable reference data keyed by name. Only the key is ever
persisted; the theme object is looked up fresh on every config load.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from proletariat.core.exceptions import UnknownThemeError
from proletariat.data import read_yaml


@dataclass(frozen=True)
class ThemeCommands:
    create: str
    remove: str
    list: str


@dataclass(frozen=True)
class ThemeMessages:
    create: str
    remove: str
    list: str
    slogan: str


@dataclass(frozen=True)
class Theme:
    """A named agent roster plus its presentation vocabulary."""

    name: str
    display_name: str
    description: str
    emoji: str
    directory: str
    agents: Tuple[str, ...]
    commands: ThemeCommands
    messages: ThemeMessages

    def has_agent(self, agent: str) -> bool:
        return agent in self.agents

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "emoji": self.emoji,
            "directory": self.directory,
            "agents": list(self.agents),
            "commands": {
                "create": self.commands.create,
                "remove": self.commands.remove,
                "list": self.commands.list,
            },
            "messages": {
                "create": self.messages.create,
                "remove": self.messages.remove,
                "list": self.messages.list,
                "slogan": self.messages.slogan,
            },
        }


def _build_theme(name: str, raw: Mapping[str, Any]) -> Theme:
    return Theme(
        name=name,
        display_name=str(raw["display_name"]),
        description=str(raw["description"]),
        emoji=str(raw["emoji"]),
        directory=str(raw["directory"]),
        # YAML may read rosters like "4runner" as strings already; keep them str.
        agents=tuple(str(a) for a in raw["agents"]),
        commands=ThemeCommands(**{k: str(v) for k, v in raw["commands"].items()}),
        messages=ThemeMessages(**{k: str(v) for k, v in raw["messages"].items()}),
    )


@lru_cache(maxsize=1)
def all_themes() -> Mapping[str, Theme]:
    """Return the read-only theme table (insertion order preserved)."""
    raw = read_yaml("themes", "themes.yaml") or {}
    return MappingProxyType({name: _build_theme(name, spec) for name, spec in raw.items()})


def theme_names() -> List[str]:
    return list(all_themes().keys())


def is_valid_theme(name: str) -> bool:
    return name in all_themes()


def get_theme(name: str) -> Theme:
    """Look up a theme by key.

    Raises:
        UnknownThemeError: If ``name`` is not in the table.
    """
    try:
        return all_themes()[name]
    except KeyError:
        raise UnknownThemeError(
            f"Theme '{name}' not found. Available themes: {', '.join(theme_names())}",
            context={"theme": name, "available": theme_names()},
        ) from None


def verb_aliases() -> Dict[str, List[str]]:
    """Map each generic command (create/remove/status) to every theme's verb for it."""
    aliases: Dict[str, List[str]] = {"create": [], "remove": [], "status": []}
    for theme in all_themes().values():
        aliases["create"].append(theme.commands.create)
        aliases["remove"].append(theme.commands.remove)
        aliases["status"].append(theme.commands.list)
    return aliases


__all__ = [
    "Theme",
    "ThemeCommands",
    "ThemeMessages",
    "all_themes",
    "theme_names",
    "is_valid_theme",
    "get_theme",
    "verb_aliases",
]
