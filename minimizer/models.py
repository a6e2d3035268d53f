"""Window and workspace models decoded from hyprctl JSON."""

from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

class Workspace(BaseModel):
    """Workspace reference as reported by hyprctl."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int = Field(..., description="Workspace id; special workspaces are non-positive")
    name: str = Field("", description="Workspace name, e.g. 'special:minimized'")

class WindowSnapshot(BaseModel):
    """Immutable record of a window captured from `hyprctl clients`/`activewindow`."""
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    address: str = Field(..., description="Stable window address, e.g. '0x55d1c2a0'")
    workspace: Workspace
    title: str = Field("", description="Window title, may be empty")
    window_class: str = Field("", alias="class", description="Application class, defaults to the title")

    @model_validator(mode="before")
    @classmethod
    def _default_class_to_title(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("class") or data.get("window_class"):
            return data
        data = dict(data)
        data["class"] = data.get("title") or ""
        data.pop("window_class", None)
        return data

    @property
    def workspace_id(self) -> int:
        return self.workspace.id

    @property
    def is_hidden(self) -> bool:
        """True while the window sits on a special (non-positive id) workspace."""
        return self.workspace.id <= 0

class ActiveWorkspace(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str = ""

WINDOW_LIST = TypeAdapter(List[WindowSnapshot])

def describe(snapshot: WindowSnapshot) -> Dict[str, Any]:
    """Short dict form for log messages."""
    return {
        "address": snapshot.address,
        "class": snapshot.window_class,
        "title": snapshot.title,
        "workspace": snapshot.workspace_id,
    }
