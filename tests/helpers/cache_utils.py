"""Reset process-wide caches between tests."""
from __future__ import annotations


def reset_proletariat_caches() -> None:
    from proletariat.cli._dispatcher import discover_commands
    from proletariat.core.settings import clear_settings_cache
    from proletariat.core.stdlib_logging import reset_logging_for_tests
    from proletariat.core.themes import all_themes
    from proletariat.data import clear_caches

    clear_caches()
    clear_settings_cache()
    all_themes.cache_clear()
    discover_commands.cache_clear()
    reset_logging_for_tests()
