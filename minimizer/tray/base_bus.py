import abc

from minimizer.tray.menu import ContextMenu
from minimizer.tray.status_notifier import StatusNotifier

STATUS_NOTIFIER_PATH = "/StatusNotifierItem"
MENU_PATH = "/Menu"

class BaseTrayBus(abc.ABC):
    """Abstract base class for publishing the tray objects on a message bus."""

    @abc.abstractmethod
    async def publish(self, bus_name: str, status_notifier: StatusNotifier, menu: ContextMenu) -> None:
        """Own ``bus_name`` and serve the icon and menu at their object paths.

        Raises:
            RegistrationFailure: The bus is unreachable or the name is taken.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def register(self, bus_name: str) -> None:
        """Announce ``bus_name`` to the tray host.

        Raises:
            RegistrationFailure: No tray host accepted the item.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:
        """Stop serving and release the bus connection. Safe to call more than once."""
        raise NotImplementedError
