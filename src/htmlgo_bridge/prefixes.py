from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from .config import PrefixDefaults

logger = logging.getLogger(__name__)


class PrefixField(str, Enum):
    PACKAGE = "packagePrefix"
    PRIMARY = "vuetifyPrefix"
    EXTENDED = "vuetifyXPrefix"

    @property
    def attribute(self) -> str:
        return _ATTRIBUTES[self]


_ATTRIBUTES = {
    PrefixField.PACKAGE: "package_prefix",
    PrefixField.PRIMARY: "component_prefix_primary",
    PrefixField.EXTENDED: "component_prefix_extended",
}


@dataclass(frozen=True, slots=True)
class PrefixConfig:
    package_prefix: str = "h"
    component_prefix_primary: str = "v"
    component_prefix_extended: str = "vx"

    @classmethod
    def from_defaults(cls, defaults: PrefixDefaults) -> "PrefixConfig":
        return cls(
            package_prefix=defaults.package_prefix,
            component_prefix_primary=defaults.component_prefix_primary,
            component_prefix_extended=defaults.component_prefix_extended,
        )

    def as_payload(self) -> dict[str, str]:
        return {
            PrefixField.PACKAGE.value: self.package_prefix,
            PrefixField.PRIMARY.value: self.component_prefix_primary,
            PrefixField.EXTENDED.value: self.component_prefix_extended,
        }

    def is_valid(self) -> bool:
        return all(value.isidentifier() for value in self.as_payload().values())


PrefixListener = Callable[[PrefixField, str], None]


class PrefixStore:
    """Holds the three prefixes every forward request carries."""

    def __init__(self, initial: PrefixConfig | None = None) -> None:
        self._config = initial or PrefixConfig()
        self._listeners: list[PrefixListener] = []

    def get(self) -> PrefixConfig:
        return self._config

    def set(self, field: PrefixField | str, value: str) -> None:
        prefix_field = PrefixField(field)
        if not value.strip():
            logger.warning("Empty %s accepted; generated code will likely be invalid", prefix_field.value)
        elif not value.isidentifier():
            logger.warning("%s=%r is not identifier-safe", prefix_field.value, value)
        self._config = replace(self._config, **{prefix_field.attribute: value})
        for listener in list(self._listeners):
            listener(prefix_field, value)

    def subscribe(self, listener: PrefixListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


__all__ = ["PrefixConfig", "PrefixField", "PrefixListener", "PrefixStore"]
