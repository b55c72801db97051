"""Access to the ``[custom]`` section of domain.toml."""

from protean.utils.globals import current_domain

DEFAULTS = {
    "side_effect_timeout_seconds": 5.0,
    "board_scan_limit": 1000,
    "scoreboard_database_uri": "sqlite:///orderdesk_scoreboard.db",
}


def custom_setting(name: str, default=None):
    """Return a custom setting of the active domain, falling back to DEFAULTS."""
    fallback = DEFAULTS.get(name) if default is None else default
    custom = current_domain.config.get("custom") or {}
    value = custom.get(name)
    return fallback if value is None else value
