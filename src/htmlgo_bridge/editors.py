"""Subscription interface between the controller and the two editors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

ContentListener = Callable[[str], None]
FocusListener = Callable[[], None]
SelectionListener = Callable[[int, int], None]


@dataclass(slots=True)
class Subscription:
    _cancel: Callable[[], None]
    active: bool = True

    def dispose(self) -> None:
        if self.active:
            self._cancel()
            self.active = False


class Editor(Protocol):
    def get_text(self) -> str:  # pragma: no cover - interface
        ...

    def set_text(self, text: str) -> None:  # pragma: no cover - interface
        ...

    def on_content_changed(self, listener: ContentListener) -> Subscription:  # pragma: no cover - interface
        ...

    def on_focus(self, listener: FocusListener) -> Subscription:  # pragma: no cover - interface
        ...

    def on_selection_changed(self, listener: SelectionListener) -> Subscription:  # pragma: no cover - interface
        ...


def _subscribe(listeners: list[Callable[..., None]], listener: Callable[..., None]) -> Subscription:
    listeners.append(listener)

    def cancel() -> None:
        if listener in listeners:
            listeners.remove(listener)

    return Subscription(cancel)


class TextBuffer:
    """In-memory editor used by the CLI, the local API and tests."""

    def __init__(self, name: str, text: str = "") -> None:
        self.name = name
        self._text = text
        self._content_listeners: list[ContentListener] = []
        self._focus_listeners: list[FocusListener] = []
        self._selection_listeners: list[SelectionListener] = []

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if text == self._text:
            return
        self._text = text
        for listener in list(self._content_listeners):
            listener(text)

    def focus(self) -> None:
        for listener in list(self._focus_listeners):
            listener()

    def select(self, start: int, end: int) -> None:
        start, end = sorted((max(0, start), min(len(self._text), end)))
        for listener in list(self._selection_listeners):
            listener(start, end)

    def on_content_changed(self, listener: ContentListener) -> Subscription:
        return _subscribe(self._content_listeners, listener)

    def on_focus(self, listener: FocusListener) -> Subscription:
        return _subscribe(self._focus_listeners, listener)

    def on_selection_changed(self, listener: SelectionListener) -> Subscription:
        return _subscribe(self._selection_listeners, listener)


__all__ = ["Editor", "Subscription", "TextBuffer"]
