"""
Navigation routes for the presentation layer.

A route is a destination view plus a payload. Equality is spelled out
per payload kind: two routes are equal only when they name the same view
and carry the same kind of payload with equal fields.
"""

from enum import Enum
from typing import Union


class View(Enum):
    MAIN_MENU = "main_menu"
    LOG_VIDEO = "log_video"
    LOG_LIST = "log_list"
    LOG_DETAILS = "log_details"
    SETTINGS = "settings"
    STATS = "stats"
    SYNC = "sync"


class NoPayload:
    """Route without parameters."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return type(other) is NoPayload

    def __hash__(self) -> int:
        return hash(NoPayload)

    def __repr__(self) -> str:
        return "NoPayload()"


class VideoRef:
    """Route to a specific video (details or edit form)."""

    __slots__ = ("video_id",)

    def __init__(self, video_id: str):
        self.video_id = video_id

    def __eq__(self, other: object) -> bool:
        return type(other) is VideoRef and other.video_id == self.video_id

    def __hash__(self) -> int:
        return hash((VideoRef, self.video_id))

    def __repr__(self) -> str:
        return f"VideoRef({self.video_id!r})"


class SettingsCursor:
    """Route back into the settings list at a given row."""

    __slots__ = ("list_index",)

    def __init__(self, list_index: int):
        self.list_index = list_index

    def __eq__(self, other: object) -> bool:
        return type(other) is SettingsCursor and other.list_index == self.list_index

    def __hash__(self) -> int:
        return hash((SettingsCursor, self.list_index))

    def __repr__(self) -> str:
        return f"SettingsCursor({self.list_index})"


Payload = Union[NoPayload, VideoRef, SettingsCursor]


class Route:
    """A view plus its payload."""

    __slots__ = ("view", "payload")

    def __init__(self, view: View, payload: Payload | None = None):
        self.view = view
        self.payload = payload if payload is not None else NoPayload()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Route):
            return NotImplemented
        return self.view is other.view and self.payload == other.payload

    def __hash__(self) -> int:
        return hash((self.view, self.payload))

    def __repr__(self) -> str:
        return f"Route({self.view.name}, {self.payload!r})"


def video_route(view: View, video_id: str) -> Route:
    return Route(view, VideoRef(video_id))
