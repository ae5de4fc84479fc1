"""Password prompts for protected and hidden networks.

Both prompts commit only when the confirm key is released in one of their
fields. Typing, focus changes and blur never commit, and nothing is
validated here: whatever was typed, including an empty string, is forwarded.
"""

import logging
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

CONFIRM_KEY = "Enter"
PLACEHOLDER = "Type ENTER to validate"

ESSID_FIELD = "essid"
PASSWORD_FIELD = "password"


class PasswordPrompt:
    """Single password field for a listed protected network."""

    def __init__(self, on_validate: Callable[[str], None], essid: Optional[str] = None) -> None:
        """Initialize the prompt.

        Args:
            on_validate: Receives the password on confirm
            essid: Network the prompt is anchored to
        """
        self._on_validate = on_validate
        self.essid = essid
        self.password = ""

    def change(self, value: str) -> None:
        """Update the field as the user types."""
        self.password = value

    def key_up(self, key: str, value: Optional[str] = None) -> bool:
        """Handle a key release in the password field.

        Args:
            key: Released key name
            value: Current field contents, if the caller tracks them

        Returns:
            True if the prompt committed
        """
        if value is not None:
            self.password = value
        if key != CONFIRM_KEY:
            return False

        logger.debug("Password confirmed for %s", self.essid)
        self._on_validate(self.password)
        return True


class HiddenNetworkPrompt:
    """Essid and password fields for a network that is not advertised.

    The essid field has focus when the prompt opens. Confirming from either
    field forwards both current values.
    """

    def __init__(self, on_validate: Callable[[str, str], None]) -> None:
        """Initialize the prompt.

        Args:
            on_validate: Receives (essid, password) on confirm
        """
        self._on_validate = on_validate
        self._values: Dict[str, str] = {ESSID_FIELD: "", PASSWORD_FIELD: ""}
        self.focused = ESSID_FIELD

    @property
    def essid(self) -> str:
        """Current essid field contents."""
        return self._values[ESSID_FIELD]

    @property
    def password(self) -> str:
        """Current password field contents."""
        return self._values[PASSWORD_FIELD]

    def _check_field(self, field: str) -> None:
        if field not in self._values:
            raise ValueError(f"Unknown field: {field}")

    def focus(self, field: str) -> None:
        """Move focus to a field."""
        self._check_field(field)
        self.focused = field

    def change(self, field: str, value: str) -> None:
        """Update a field as the user types.

        Args:
            field: ESSID_FIELD or PASSWORD_FIELD
            value: New field contents
        """
        self._check_field(field)
        self._values[field] = value

    def key_up(self, field: str, key: str) -> bool:
        """Handle a key release in one of the fields.

        Args:
            field: Field the key was released in
            key: Released key name

        Returns:
            True if the prompt committed
        """
        self._check_field(field)
        if key != CONFIRM_KEY:
            return False

        logger.debug("Hidden network credentials confirmed for %r", self.essid)
        self._on_validate(self.essid, self.password)
        return True
