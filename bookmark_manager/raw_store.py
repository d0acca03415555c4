"""Raw store interface for bookmark data."""

from abc import ABC, abstractmethod
from typing import Union

# Metadata values are strings, except the reserved container field which holds a nested store.
Metadata = dict[str, Union[str, "RawData"]]
RawData = dict[str, Metadata]


class RawStore(ABC):
    """Abstract base class for raw stores.

    A raw store only knows how to read the whole state and replace it wholesale.
    Entry semantics live in `Datastore`.
    """

    @abstractmethod
    def get(self) -> RawData | None:
        """Get the store state. `None` means there is no saved state."""
        pass

    @abstractmethod
    def set(self, state: RawData | None) -> None:
        """Replace the store state. `None` clears any stored state.

        The state MUST NOT contain cycles.
        """
        pass

    def upgrade(self) -> bool:
        """Upgrade legacy data formats.

        Returns:
            True if any changes were made
        """
        return False
