"""Stored theme preference ('' is the default dark theme)."""
from typing import Optional

from storefront.services.state_store import ClientState, STORAGE_KEYS

LIGHT_THEME = 'light'
DEFAULT_THEME = ''
THEMES = (DEFAULT_THEME, LIGHT_THEME)


class ThemePreference:

    def __init__(self, state: Optional[ClientState] = None):
        self._state = state

    def load(self) -> str:
        if self._state is None:
            return DEFAULT_THEME
        theme = self._state.load(STORAGE_KEYS['theme'], DEFAULT_THEME)
        return theme if theme in THEMES else DEFAULT_THEME

    def toggle(self) -> str:
        """Switch between light and default and persist the choice."""
        theme = DEFAULT_THEME if self.load() == LIGHT_THEME else LIGHT_THEME
        if self._state is not None:
            self._state.save(STORAGE_KEYS['theme'], theme)
        return theme
