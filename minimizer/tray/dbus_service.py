"""D-Bus publication of the tray icon and its menu through pydbus.

pydbus serves exported objects from a GLib main loop, which runs here in a
daemon thread next to the asyncio loop. Exported methods never call hyprctl
themselves: they schedule the matching coroutine on the asyncio loop and
return, so the bus keeps answering while a window action is in flight.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Dict, List, Optional, Tuple

from gi.repository import GLib
from pydbus import SessionBus

from minimizer.tray.base_bus import BaseTrayBus, MENU_PATH, STATUS_NOTIFIER_PATH
from minimizer.tray.menu import ContextMenu, LayoutNode
from minimizer.tray.status_notifier import StatusNotifier
from minimizer.utils.exceptions import RegistrationFailure

logger = logging.getLogger(__name__)

WATCHER_NAME = "org.kde.StatusNotifierWatcher"
WATCHER_PATH = "/StatusNotifierWatcher"

def to_variant(value: Any) -> GLib.Variant:
    """Wrap a plain menu property value in a GLib.Variant."""
    if isinstance(value, GLib.Variant):
        return value
    if isinstance(value, bool):
        return GLib.Variant("b", value)
    if isinstance(value, int):
        return GLib.Variant("i", value)
    if isinstance(value, (list, tuple)):
        return GLib.Variant("as", [str(v) for v in value])
    return GLib.Variant("s", str(value))

def properties_to_variants(properties: Dict[str, Any]) -> Dict[str, GLib.Variant]:
    return {name: to_variant(value) for name, value in properties.items()}

def layout_to_variants(node: LayoutNode) -> Tuple[int, Dict[str, GLib.Variant], List[GLib.Variant]]:
    """Convert a (id, properties, children) tree to the (ia{sv}av) wire shape."""
    node_id, properties, children = node
    return (
        node_id,
        properties_to_variants(properties),
        [GLib.Variant("(ia{sv}av)", layout_to_variants(child)) for child in children],
    )

def _log_failure(future: Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error(f"Tray handler failed: {error}", exc_info=error)

class _LoopBound:
    """Base for exported objects that forward work to the asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop

    def _submit(self, coro) -> Future:
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        future.add_done_callback(_log_failure)
        return future

class StatusNotifierItemObject(_LoopBound):
    """
    <node>
        <interface name="org.kde.StatusNotifierItem">
            <property name="Category" type="s" access="read"/>
            <property name="Id" type="s" access="read"/>
            <property name="Title" type="s" access="read"/>
            <property name="Status" type="s" access="read"/>
            <property name="IconName" type="s" access="read"/>
            <property name="ToolTip" type="(sa(iiay)ss)" access="read"/>
            <property name="ItemIsMenu" type="b" access="read"/>
            <property name="Menu" type="o" access="read"/>
            <method name="Activate">
                <arg name="x" type="i" direction="in"/>
                <arg name="y" type="i" direction="in"/>
            </method>
            <method name="SecondaryActivate">
                <arg name="x" type="i" direction="in"/>
                <arg name="y" type="i" direction="in"/>
            </method>
        </interface>
    </node>
    """

    def __init__(self, notifier: StatusNotifier, loop: asyncio.AbstractEventLoop):
        super().__init__(loop)
        self._notifier = notifier

    @property
    def Category(self) -> str:
        return self._notifier.category

    @property
    def Id(self) -> str:
        return self._notifier.id

    @property
    def Title(self) -> str:
        return self._notifier.title

    @property
    def Status(self) -> str:
        return self._notifier.status

    @property
    def IconName(self) -> str:
        return self._notifier.icon_name

    @property
    def ToolTip(self):
        return self._notifier.tool_tip

    @property
    def ItemIsMenu(self) -> bool:
        return self._notifier.item_is_menu

    @property
    def Menu(self) -> str:
        return self._notifier.menu_path

    def Activate(self, x, y):
        logger.debug("[D-Bus] Activate called")
        self._submit(self._notifier.activate(x, y))

    def SecondaryActivate(self, x, y):
        logger.debug("[D-Bus] SecondaryActivate called")
        self._submit(self._notifier.secondary_activate(x, y))

class DbusMenuObject(_LoopBound):
    """
    <node>
        <interface name="com.canonical.dbusmenu">
            <property name="Version" type="u" access="read"/>
            <property name="TextDirection" type="s" access="read"/>
            <property name="Status" type="s" access="read"/>
            <property name="IconThemePath" type="as" access="read"/>
            <method name="GetLayout">
                <arg name="parentId" type="i" direction="in"/>
                <arg name="recursionDepth" type="i" direction="in"/>
                <arg name="propertyNames" type="as" direction="in"/>
                <arg name="revision" type="u" direction="out"/>
                <arg name="layout" type="(ia{sv}av)" direction="out"/>
            </method>
            <method name="GetGroupProperties">
                <arg name="ids" type="ai" direction="in"/>
                <arg name="propertyNames" type="as" direction="in"/>
                <arg name="properties" type="a(ia{sv})" direction="out"/>
            </method>
            <method name="GetProperty">
                <arg name="id" type="i" direction="in"/>
                <arg name="name" type="s" direction="in"/>
                <arg name="value" type="v" direction="out"/>
            </method>
            <method name="Event">
                <arg name="id" type="i" direction="in"/>
                <arg name="eventId" type="s" direction="in"/>
                <arg name="data" type="v" direction="in"/>
                <arg name="timestamp" type="u" direction="in"/>
            </method>
            <method name="EventGroup">
                <arg name="events" type="a(isvu)" direction="in"/>
                <arg name="idErrors" type="ai" direction="out"/>
            </method>
            <method name="AboutToShow">
                <arg name="id" type="i" direction="in"/>
                <arg name="needUpdate" type="b" direction="out"/>
            </method>
            <method name="AboutToShowGroup">
                <arg name="ids" type="ai" direction="in"/>
                <arg name="updatesNeeded" type="ai" direction="out"/>
                <arg name="idErrors" type="ai" direction="out"/>
            </method>
        </interface>
    </node>
    """

    def __init__(self, menu: ContextMenu, loop: asyncio.AbstractEventLoop):
        super().__init__(loop)
        self._menu = menu

    @property
    def Version(self) -> int:
        return self._menu.VERSION

    @property
    def TextDirection(self) -> str:
        return self._menu.TEXT_DIRECTION

    @property
    def Status(self) -> str:
        return self._menu.STATUS

    @property
    def IconThemePath(self) -> List[str]:
        return []

    def GetLayout(self, parent_id, recursion_depth, property_names):
        revision, root = self._menu.get_layout(parent_id, recursion_depth, property_names)
        return revision, layout_to_variants(root)

    def GetGroupProperties(self, ids, property_names):
        return [
            (item_id, properties_to_variants(properties))
            for item_id, properties in self._menu.get_group_properties(ids, property_names)
        ]

    def GetProperty(self, item_id, name):
        return to_variant(self._menu.get_property(item_id, name))

    def Event(self, item_id, event_id, data, timestamp):
        logger.debug(f"[D-Bus Menu] Event received: id={item_id}, event_id={event_id}")
        self._submit(self._menu.event(item_id, event_id, data, timestamp))

    def EventGroup(self, events):
        logger.debug(f"[D-Bus Menu] EventGroup received with {len(events)} events")
        events = [tuple(event) for event in events]
        self._submit(self._menu.event_group(events))
        return self._menu.unknown_ids(item_id for item_id, _, _, _ in events)

    def AboutToShow(self, item_id):
        return self._menu.about_to_show(item_id)

    def AboutToShowGroup(self, ids):
        return self._menu.about_to_show_group(ids)

class TrayBus(BaseTrayBus):
    """Session bus publication using pydbus on a background GLib main loop."""

    def __init__(self, bus: Optional[Any] = None) -> None:
        self._bus = bus
        self._publication = None
        self._mainloop: Optional[GLib.MainLoop] = None
        self._thread: Optional[threading.Thread] = None

    async def publish(self, bus_name: str, status_notifier: StatusNotifier, menu: ContextMenu) -> None:
        loop = asyncio.get_running_loop()
        try:
            if self._bus is None:
                self._bus = SessionBus()
            self._publication = self._bus.publish(
                bus_name,
                (STATUS_NOTIFIER_PATH, StatusNotifierItemObject(status_notifier, loop)),
                (MENU_PATH, DbusMenuObject(menu, loop)),
            )
        except (GLib.Error, RuntimeError) as e:
            # pydbus raises RuntimeError when the bus name is already owned
            raise RegistrationFailure(f"Could not publish {bus_name} on the session bus: {e}") from e

        self._mainloop = GLib.MainLoop()
        self._thread = threading.Thread(target=self._mainloop.run, name="dbus-mainloop", daemon=True)
        self._thread.start()
        logger.info(f"D-Bus service '{bus_name}' is running")

    def _register_sync(self, bus_name: str) -> None:
        watcher = self._bus.get(WATCHER_NAME, WATCHER_PATH)
        watcher.RegisterStatusNotifierItem(bus_name)

    async def register(self, bus_name: str) -> None:
        if self._bus is None:
            raise RegistrationFailure("Tray objects must be published before registering")
        logger.info("Registering with StatusNotifierWatcher...")
        try:
            await asyncio.to_thread(self._register_sync, bus_name)
        except (GLib.Error, AttributeError, KeyError) as e:
            raise RegistrationFailure(
                f"Could not register with {WATCHER_NAME}: {e}. Is a tray like Waybar running?"
            ) from e
        logger.info("Registration successful")

    async def close(self) -> None:
        if self._publication is not None:
            self._publication.unpublish()
            self._publication = None
        if self._mainloop is not None:
            self._mainloop.quit()
            self._mainloop = None
        if self._thread is not None:
            await asyncio.to_thread(self._thread.join, 1.0)
            self._thread = None
        if self._bus is not None:
            try:
                self._bus.con.close_sync(None)
            except GLib.Error as e:
                logger.warning(f"Failed to close bus connection: {e}")
            self._bus = None
