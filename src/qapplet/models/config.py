"""
Applet configuration model

AppletConfig is built once per process_config() call from the root config
the host sends, and replaced wholesale on the next call.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from qapplet.models.geometry import Geometry

DEFAULT_STORAGE_LOCATION = "local-storage"
DEFAULT_POLLING_INTERVAL = 300.0  # seconds


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge override into a copy of base.

    Nested mappings merge recursively; lists and scalars from override
    replace the base value wholesale.
    """
    merged: Dict[str, Any] = {k: thaw(v) for k, v in base.items()}
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = thaw(value)
    return merged


def freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples"""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of freeze(): plain dicts and lists, safe to mutate or serialize"""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


def normalize_root(root: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Guarantee root["applet"]["defaults"] and root["applet"]["user"] exist"""
    normalized = thaw(root) if root else {}
    applet = normalized.get("applet") or {}
    applet.setdefault("defaults", {})
    applet.setdefault("user", {})
    applet["defaults"] = applet["defaults"] or {}
    applet["user"] = applet["user"] or {}
    normalized["applet"] = applet
    return normalized


@dataclass(frozen=True)
class AppletConfig:
    """Immutable view of one processed root config"""
    root: Mapping[str, Any]
    extension_id: Optional[str]
    config: Mapping[str, Any]
    authorization: Mapping[str, Any]
    geometry: Geometry = field(default_factory=Geometry.default)
    storage_location: str = DEFAULT_STORAGE_LOCATION
    dev_mode: bool = False
    polling_interval: float = DEFAULT_POLLING_INTERVAL

    @classmethod
    def from_root(cls, root: Optional[Mapping[str, Any]]) -> 'AppletConfig':
        """
        Derive the applet config from a root config mapping.

        Accepts None or {} and still yields a usable config with a default
        geometry, empty authorization and empty merged applet config.
        """
        normalized = normalize_root(root)
        applet = normalized["applet"]
        merged = deep_merge(applet["defaults"], applet["user"])

        interval = normalized.get("pollingInterval")
        if interval is None:
            interval = merged.get("pollingInterval", DEFAULT_POLLING_INTERVAL)

        return cls(
            root=freeze(normalized),
            extension_id=normalized.get("extensionId"),
            config=freeze(merged),
            authorization=freeze(normalized.get("authorization") or {}),
            geometry=Geometry.from_dict(normalized.get("geometry")),
            storage_location=normalized.get("storageLocation") or DEFAULT_STORAGE_LOCATION,
            dev_mode=bool(normalized.get("devMode", False)),
            polling_interval=float(interval),
        )
