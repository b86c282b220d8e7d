"""
Local storage - persistent string key/value store for applets

One file per key inside the storage directory. put()/get() add a type tag
prefix so numbers, null and JSON values come back with their type:

    ~N~        null
    ~#~42      number
    ~{~{...}   JSON object or array
    anything   plain string
"""

import json
from pathlib import Path
from typing import Any, List, Optional, Union
from urllib.parse import quote, unquote

from qapplet.errors import StorageQuotaError
from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.STORAGE)

NUMBER_FLAG = "~#~"
JSON_FLAG = "~{~"
NULL_FLAG = "~N~"

DEFAULT_QUOTA = 50 * 1024 * 1024


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise TypeError("key must be a string")


class Storage:
    """
    Directory-backed key/value store.

    Example:
        store = Storage("local-storage")
        store.put("lastRun", 1700000000)
        store.put("state", {"seen": ["a", "b"]})
        store.get("lastRun")   # 1700000000
    """

    def __init__(self, path: Union[str, Path], quota: Optional[int] = None):
        self.path = Path(path)
        self.quota = DEFAULT_QUOTA if quota is None else quota
        self.path.mkdir(parents=True, exist_ok=True)
        log.debug(f"Storage opened at {self.path}", quota=self.quota)

    # === Raw string API ===

    def _file_for(self, key: str) -> Path:
        return self.path / quote(key, safe="")

    def _used_bytes(self, excluding: Optional[Path] = None) -> int:
        return sum(
            f.stat().st_size for f in self.path.iterdir()
            if f.is_file() and f != excluding
        )

    def set_item(self, key: str, value: str) -> None:
        _check_key(key)
        target = self._file_for(key)
        encoded = str(value).encode("utf-8")
        if self._used_bytes(excluding=target) + len(encoded) > self.quota:
            raise StorageQuotaError(f"Storing '{key}' would exceed quota of {self.quota} bytes")
        target.write_bytes(encoded)

    def get_item(self, key: str) -> Optional[str]:
        _check_key(key)
        target = self._file_for(key)
        if not target.is_file():
            return None
        return target.read_text(encoding="utf-8")

    def remove_item(self, key: str) -> None:
        _check_key(key)
        self._file_for(key).unlink(missing_ok=True)

    def keys(self) -> List[str]:
        return sorted(unquote(f.name) for f in self.path.iterdir() if f.is_file())

    @property
    def length(self) -> int:
        return len(self.keys())

    def clear(self) -> None:
        for f in self.path.iterdir():
            if f.is_file():
                f.unlink()

    # === Typed API ===

    def put(self, key: str, value: Any) -> None:
        """Store None, a string, a number, or a JSON-serializable object"""
        _check_key(key)

        if value is None:
            self.set_item(key, NULL_FLAG)
        elif isinstance(value, str):
            self.set_item(key, value)
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            self.set_item(key, JSON_FLAG + json.dumps(value))
        else:
            self.set_item(key, NUMBER_FLAG + repr(value))

    def get(self, key: str) -> Any:
        """
        Read a value stored with put().

        Missing keys and null both come back as None. A JSON payload that
        no longer parses is returned as the raw stored string.
        """
        _check_key(key)

        raw = self.get_item(key)
        if raw is None or raw == NULL_FLAG:
            return None

        if raw.startswith(JSON_FLAG):
            try:
                return json.loads(raw[len(JSON_FLAG):])
            except ValueError:
                log.warn(f"Corrupt JSON value for key '{key}', returning raw string")
                return raw

        if raw.startswith(NUMBER_FLAG):
            number = raw[len(NUMBER_FLAG):]
            try:
                return int(number)
            except ValueError:
                return float(number)

        return raw
