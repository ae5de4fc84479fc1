"""Network list rendered from orchestrator snapshots."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from captive_portal.portal.credential_prompt import HiddenNetworkPrompt, PasswordPrompt
from captive_portal.portal.orchestrator import ConnectionOrchestrator
from captive_portal.portal.state import PortalSnapshot

LOADING_TEXT = "Loading..."
ERROR_TEXT = "An error occurred"

HIDDEN_NETWORK_BUTTON = "Hidden network..."
ACCESS_POINT_BUTTON = "Use access point"
REFRESH_BUTTON = "Refresh"


@dataclass(frozen=True)
class ListEntry:
    """One row of the network list."""

    text: str
    icon: str  # "lock", "unlock" or "refresh" for placeholders
    disabled: bool = False
    essid: Optional[str] = None
    is_protected: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "icon": self.icon,
            "disabled": self.disabled,
            "essid": self.essid,
            "is_protected": self.is_protected,
        }


def render_entries(snapshot: PortalSnapshot) -> List[ListEntry]:
    """Build the list rows for a snapshot.

    An empty list shows a single disabled placeholder: the error text if the
    error flag is set, otherwise the loading text.

    Args:
        snapshot: Portal state to render

    Returns:
        Rows in display order
    """
    if not snapshot.networks:
        text = ERROR_TEXT if snapshot.error else LOADING_TEXT
        return [ListEntry(text=text, icon="refresh", disabled=True)]

    return [
        ListEntry(
            text=network.essid,
            icon="lock" if network.is_protected else "unlock",
            essid=network.essid,
            is_protected=network.is_protected,
        )
        for network in snapshot.networks
    ]


class NetworkListView:
    """The portal screen: network list, busy overlay and the three buttons.

    Holds no state of its own; every action goes to the orchestrator.
    """

    def __init__(self, orchestrator: ConnectionOrchestrator) -> None:
        """Initialize the view.

        Args:
            orchestrator: Orchestrator that owns the portal state
        """
        self._orchestrator = orchestrator

    def entries(self) -> List[ListEntry]:
        """Rows for the current state."""
        return render_entries(self._orchestrator.snapshot())

    def overlay_visible(self) -> bool:
        """Whether the busy overlay covers the screen."""
        return self._orchestrator.snapshot().busy

    def select(self, entry: ListEntry) -> Optional[PasswordPrompt]:
        """Handle a click on a row.

        Open networks are joined right away. Protected networks get a
        password prompt anchored to the row.

        Args:
            entry: Clicked row

        Returns:
            Password prompt for a protected network, otherwise None
        """
        if entry.disabled or entry.essid is None:
            return None

        essid = entry.essid
        if not entry.is_protected:
            self._orchestrator.select_open_network(essid)
            return None

        return PasswordPrompt(
            on_validate=lambda password: self._orchestrator.select_protected_network(
                essid, password
            ),
            essid=essid,
        )

    def hidden_network(self) -> HiddenNetworkPrompt:
        """Handle the hidden network button.

        Returns:
            Blank essid/password prompt wired to the orchestrator
        """
        return HiddenNetworkPrompt(on_validate=self._orchestrator.select_protected_network)

    def use_access_point(self) -> None:
        """Handle the access point button."""
        self._orchestrator.request_access_point()

    def refresh(self) -> None:
        """Handle the refresh button."""
        self._orchestrator.refresh()

    def render(self) -> Dict[str, Any]:
        """Describe the whole screen for a client.

        Returns:
            Dictionary with overlay flag, rows and buttons
        """
        snapshot = self._orchestrator.snapshot()
        return {
            "overlay": snapshot.busy,
            "entries": [entry.to_dict() for entry in render_entries(snapshot)],
            "buttons": [
                {"text": HIDDEN_NETWORK_BUTTON, "disabled": not snapshot.interactive},
                {"text": ACCESS_POINT_BUTTON, "disabled": not snapshot.can_use_access_point},
                {"text": REFRESH_BUTTON, "disabled": not snapshot.interactive},
            ],
            "state": snapshot.to_dict(),
        }
