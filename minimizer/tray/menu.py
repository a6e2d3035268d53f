"""Context menu behind the tray icon (com.canonical.dbusmenu semantics).

The menu never changes while the process runs: items are derived from the
configured variant and the captured window on every call, so there is no
menu state to guard.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from minimizer.actions import WindowActions
from minimizer.models import WindowSnapshot
from minimizer.utils.exit_signal import ExitSignal
from minimizer.utils.recovery import ChainResult

logger = logging.getLogger(__name__)

class MenuAction(Enum):
    REOPEN_CURRENT = "reopen-current"
    REOPEN_ORIGINAL = "reopen-original"
    CLOSE = "close"

MENU_LAYOUTS = {
    "minimal": (MenuAction.REOPEN_CURRENT, MenuAction.CLOSE),
    "extended": (MenuAction.REOPEN_CURRENT, MenuAction.REOPEN_ORIGINAL, MenuAction.CLOSE),
}

# Layout revisions are fixed per variant; callers cache on them
LAYOUT_REVISIONS = {
    "minimal": 1,
    "extended": 2,
}

@dataclass(frozen=True)
class MenuItem:
    id: int
    label: str
    action: MenuAction

# (id, properties, children)
LayoutNode = Tuple[int, Dict[str, Any], List[Any]]

class ContextMenu:
    """Menu model and click handling for one minimized window."""

    ROOT_ID = 0
    VERSION = 3
    TEXT_DIRECTION = "ltr"
    STATUS = "normal"

    def __init__(self, snapshot: WindowSnapshot, actions: WindowActions,
                 exit_signal: ExitSignal, variant: str = "extended"):
        if variant not in MENU_LAYOUTS:
            raise ValueError(f"Unknown menu variant: {variant}")
        self.snapshot = snapshot
        self.variant = variant
        self._actions = actions
        self._exit_signal = exit_signal
        self._actions_by_id: Dict[int, MenuAction] = {
            index: action for index, action in enumerate(MENU_LAYOUTS[variant], start=1)
        }
        self._handlers = {
            MenuAction.REOPEN_CURRENT: actions.reopen_on_current_workspace,
            MenuAction.REOPEN_ORIGINAL: actions.reopen_on_original_workspace,
            MenuAction.CLOSE: actions.close,
        }

    @property
    def revision(self) -> int:
        return LAYOUT_REVISIONS[self.variant]

    def _label(self, action: MenuAction) -> str:
        title = self.snapshot.title
        if action is MenuAction.REOPEN_CURRENT:
            return f"Open {title}"
        if action is MenuAction.REOPEN_ORIGINAL:
            return f"Open {title} on workspace {self.snapshot.workspace_id}"
        return f"Close {title}"

    def items(self) -> List[MenuItem]:
        return [
            MenuItem(item_id, self._label(action), action)
            for item_id, action in self._actions_by_id.items()
        ]

    def get_item(self, item_id: int) -> Optional[MenuItem]:
        action = self._actions_by_id.get(item_id)
        if action is None:
            return None
        return MenuItem(item_id, self._label(action), action)

    def unknown_ids(self, ids: Iterable[int]) -> List[int]:
        return [item_id for item_id in ids if item_id not in self._actions_by_id]

    @staticmethod
    def _filter(properties: Dict[str, Any], property_names: Sequence[str]) -> Dict[str, Any]:
        if not property_names:
            return properties
        return {name: value for name, value in properties.items() if name in property_names}

    def item_properties(self, item: MenuItem) -> Dict[str, Any]:
        return {
            "label": item.label,
            "enabled": True,
            "visible": True,
            "type": "standard",
        }

    def get_layout(self, parent_id: int = 0, recursion_depth: int = -1,
                   property_names: Sequence[str] = ()) -> Tuple[int, LayoutNode]:
        """Return (revision, root node). The tree is flat, so the arguments only filter properties."""
        children = [
            (item.id, self._filter({"type": "standard", "label": item.label}, property_names), [])
            for item in self.items()
        ]
        root = (self.ROOT_ID, {"children-display": "submenu"}, children)
        return self.revision, root

    def get_group_properties(self, ids: Iterable[int],
                             property_names: Sequence[str] = ()) -> List[Tuple[int, Dict[str, Any]]]:
        result = []
        for item_id in ids:
            item = self.get_item(item_id)
            if item is None:
                continue
            result.append((item_id, self._filter(self.item_properties(item), property_names)))
        return result

    def get_property(self, item_id: int, name: str) -> Any:
        item = self.get_item(item_id)
        if item is None:
            raise KeyError(f"Unknown menu item: {item_id}")
        return self.item_properties(item)[name]

    async def event(self, item_id: int, event_id: str, data: Any = None, timestamp: int = 0) -> Optional[ChainResult]:
        """Handle a menu event. Only clicks on known items do anything.

        Returns the action's chain result, or None when the event was ignored.
        """
        logger.debug(f"Menu event: id={item_id}, event_id={event_id}")
        if event_id != "clicked":
            return None

        action = self._actions_by_id.get(item_id)
        if action is None:
            logger.warning(f"Clicked on unknown menu item id: {item_id}")
            return None

        logger.info(f"Menu action triggered: {action.value}")
        result = await self._handlers[action]()
        if not result.succeeded:
            logger.error(f"Menu action {action.value} did not complete")

        self._exit_signal.fire(f"menu action {action.value}")
        return result

    async def event_group(self, events: Iterable[Tuple[int, str, Any, int]]) -> List[int]:
        """Handle events in the order given. Returns the ids that are not menu items."""
        events = list(events)
        logger.debug(f"Menu event group with {len(events)} events")
        for item_id, event_id, data, timestamp in events:
            await self.event(item_id, event_id, data, timestamp)
        return self.unknown_ids(item_id for item_id, _, _, _ in events)

    def about_to_show(self, item_id: int) -> bool:
        return False

    def about_to_show_group(self, ids: Iterable[int]) -> Tuple[List[int], List[int]]:
        return [], []
