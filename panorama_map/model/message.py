"""Message - User-facing messages for the panorama map UI.

Architecture:
- LEFT (sidebar): ONE blue info message with the current lookup status,
  or a yellow warning when the scene provider is not configured
- Toasts: transient popups for lookup failures

Design Principles:
- Maximum ONE message per panel location at any time
- Lookup failures never block the UI: the panorama simply stays as it was
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class MessageLevel(Enum):
    """Display level for UI messages."""

    INFO = "info"  # Blue - context/status/loading
    WARNING = "warning"  # Yellow - configuration problems
    ERROR = "error"  # Red - unexpected failures


@dataclass(frozen=True)
class Message(ABC):
    """Abstract base class for user-facing messages displayed inline (sidebar/panels).

    These messages are rendered as st.info/st.warning/st.error blocks that persist
    in the UI until replaced.
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for display in Streamlit."""
        raise NotImplementedError

    @property
    @abstractmethod
    def level(self) -> MessageLevel:
        """Display level."""
        raise NotImplementedError

    def display(self) -> None:
        """Render this message using the appropriate Streamlit function."""
        import streamlit as st

        render_fn = {
            MessageLevel.INFO: st.info,
            MessageLevel.WARNING: st.warning,
            MessageLevel.ERROR: st.error,
        }[self.level]
        render_fn(self.message)


@dataclass(frozen=True)
class ToastMessage(ABC):
    """Abstract base class for transient popup notifications.

    Good for: lookup failures, quick confirmations
    Bad for: status displays
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message for the toast notification."""
        raise NotImplementedError

    @property
    @abstractmethod
    def icon(self) -> str:
        """Icon to show in toast. Override in subclasses."""
        raise NotImplementedError

    def display(self) -> None:
        """Show this message as a toast notification and log it."""
        import streamlit as st

        logger = logging.getLogger(__name__)
        logger.info(f"[TOAST] {self.icon} {self.message}")
        st.toast(f"{self.icon} {self.message}")


# =============================================================================
# TOAST MESSAGES
# =============================================================================


@dataclass(frozen=True)
class NoPanoramaFoundMessage(ToastMessage):
    """The provider has no imagery near the selected point."""

    lat: float
    lon: float
    radius_m: float

    @property
    def icon(self) -> str:
        return "🔭"

    @property
    def message(self) -> str:
        return f"No panorama found within {self.radius_m:.0f}m of ({self.lat:.5f}, {self.lon:.5f})."


@dataclass(frozen=True)
class LookupFailedMessage(ToastMessage):
    """The scene lookup failed (network, provider error, missing token)."""

    reason: str

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return f"Look Around unavailable: {self.reason}"


# =============================================================================
# LEFT PANEL (SIDEBAR) - Status messages
# =============================================================================


@dataclass(frozen=True)
class SelectAnnotationHintMessage(Message):
    """Nothing selected yet."""

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return "📍 **Select a point of interest** on the map to look around. Click empty map to close the panorama."


@dataclass(frozen=True)
class LookingAroundMessage(Message):
    """A lookup is in flight for the latest selection."""

    title: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.INFO

    @property
    def message(self) -> str:
        return f"🔄 **Looking around** {self.title}..."


@dataclass(frozen=True)
class MissingAccessTokenMessage(Message):
    """No provider token configured - every lookup will fail."""

    env_var: str

    @property
    def level(self) -> MessageLevel:
        return MessageLevel.WARNING

    @property
    def message(self) -> str:
        return f"🔑 **No imagery access token.** Set `{self.env_var}` to enable street-level panoramas."
