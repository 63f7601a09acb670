"""User preferences persisted with QSettings."""

import logging
from pathlib import Path

from PySide6.QtCore import QObject, QSettings, Signal

from ctxmap.utils.pricing import DEFAULT_TIER, PRICING

logger = logging.getLogger(__name__)

ORGANIZATION = "ctxmap"
APPLICATION = "ctxmap"

# Default values
DEFAULTS = {
    "general/projectsDir": "~/.claude/projects",
    "analysis/topN": 10,
    "analysis/pricingTier": DEFAULT_TIER,
    "output/format": "table",
    "advanced/debugLogging": False,
}


class ConfigManager(QObject):
    """Typed access to persisted settings with fallbacks to DEFAULTS."""

    settings_changed = Signal(str)  # key

    def __init__(self, parent=None, settings_file: str | Path | None = None):
        super().__init__(parent)
        if settings_file is not None:
            self._settings = QSettings(str(settings_file), QSettings.Format.IniFormat)
        else:
            self._settings = QSettings(
                QSettings.Format.IniFormat, QSettings.Scope.UserScope,
                ORGANIZATION, APPLICATION,
            )

    def get_string(self, key: str) -> str:
        return str(self._settings.value(key, DEFAULTS.get(key, "")))

    def get_int(self, key: str) -> int:
        val = self._settings.value(key, DEFAULTS.get(key, 0))
        try:
            return int(val)
        except (ValueError, TypeError):
            logger.warning("Invalid integer for setting %s: %r", key, val)
            return DEFAULTS.get(key, 0)

    def get_bool(self, key: str) -> bool:
        val = self._settings.value(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    def set_string(self, key: str, value: str):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def set_int(self, key: str, value: int):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    # Convenience accessors for the analysis settings
    def projects_dir(self) -> Path:
        return Path(self.get_string("general/projectsDir")).expanduser()

    def top_n(self) -> int:
        n = self.get_int("analysis/topN")
        return n if n > 0 else DEFAULTS["analysis/topN"]

    def pricing_tier(self) -> str:
        tier = self.get_string("analysis/pricingTier").lower()
        if tier not in PRICING:
            logger.warning("Unknown pricing tier %r in settings, using %s", tier, DEFAULT_TIER)
            return DEFAULT_TIER
        return tier

    def debug_logging(self) -> bool:
        return self.get_bool("advanced/debugLogging")

    def sync(self):
        """Flush pending changes to disk."""
        self._settings.sync()
