"""
Observation record for an advertised debug session and its TXT codec.

An observation is what one running application publishes about itself:
where its VM service (and optionally its Dev Tools Daemon) listens, and
enough device/version metadata for a tool to pick the right session.

Wire format is one ``key=value`` entry per line. Key names are fixed for
interoperability with existing peers, including the camelCase ``dtdUri``
next to its snake_case siblings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

HOSTNAME_KEY = "hostname"
PROJECT_NAME_KEY = "project_name"
DEVICE_NAME_KEY = "device_name"
DEVICE_ID_KEY = "device_id"
TARGET_PLATFORM_KEY = "target_platform"
MODE_KEY = "mode"
WS_URI_KEY = "ws_uri"
EPOCH_KEY = "epoch"
PID_KEY = "pid"
FLUTTER_VERSION_KEY = "flutter_version"
DART_VERSION_KEY = "dart_version"

# Deliberately not snake_case: peers already read this spelling.
DTD_URI_KEY = "dtdUri"

REQUIRED_KEYS: Tuple[str, ...] = (
    HOSTNAME_KEY,
    PROJECT_NAME_KEY,
    DEVICE_NAME_KEY,
    DEVICE_ID_KEY,
    TARGET_PLATFORM_KEY,
    MODE_KEY,
    WS_URI_KEY,
    EPOCH_KEY,
    PID_KEY,
    FLUTTER_VERSION_KEY,
    DART_VERSION_KEY,
)

_UNSIGNED_INT = re.compile(r"[0-9]+")

PropertyKey = Union[str, bytes]
PropertyValue = Union[str, bytes, None]


def iter_record_entries(text: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(key, value)`` pairs from newline-delimited ``key=value`` text.

    Empty lines and lines without ``=`` are skipped. Only the first ``=``
    splits, so values may contain ``=`` themselves. Nothing is trimmed.
    """
    for line in text.split("\n"):
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        yield key, value


def _parse_unsigned(value: str) -> Optional[int]:
    if not _UNSIGNED_INT.fullmatch(value):
        return None
    return int(value)


def _check_unsigned(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True)
class MdnsObservation:
    """One discoverable debug session.

    ``dtd_uri`` is ``None`` when the session has no Dev Tools Daemon; an
    empty string is a present (if unusual) value and is kept as such.
    """

    hostname: str
    project_name: str
    device_name: str
    device_id: str
    target_platform: str
    mode: str
    ws_uri: str
    epoch: int
    pid: int
    flutter_version: str
    dart_version: str
    dtd_uri: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.ws_uri:
            raise ValueError("ws_uri must not be empty")
        _check_unsigned("epoch", self.epoch)
        _check_unsigned("pid", self.pid)

    # ------------------------------------------------------------------
    # Encoding

    def to_json(self) -> Dict[str, str]:
        """Return the wire mapping; ``dtdUri`` only appears when set."""
        data = {
            HOSTNAME_KEY: self.hostname,
            PROJECT_NAME_KEY: self.project_name,
            DEVICE_NAME_KEY: self.device_name,
            DEVICE_ID_KEY: self.device_id,
            TARGET_PLATFORM_KEY: self.target_platform,
            MODE_KEY: self.mode,
            WS_URI_KEY: self.ws_uri,
            EPOCH_KEY: str(self.epoch),
            PID_KEY: str(self.pid),
            FLUTTER_VERSION_KEY: self.flutter_version,
            DART_VERSION_KEY: self.dart_version,
        }
        if self.dtd_uri is not None:
            data[DTD_URI_KEY] = self.dtd_uri
        return data

    def to_txt(self) -> str:
        """Encode as newline-delimited ``key=value`` text."""
        return "\n".join(f"{key}={value}" for key, value in self.to_json().items())

    # ------------------------------------------------------------------
    # Decoding

    @classmethod
    def parse(cls, text: str) -> Optional["MdnsObservation"]:
        """Parse wire text into an observation.

        Returns ``None`` when a required key is missing, ``epoch`` or ``pid``
        is not a non-negative integer, or ``ws_uri`` is empty. When a key
        repeats, the last occurrence wins.
        """
        return cls._from_fields(dict(iter_record_entries(text)))

    @classmethod
    def from_properties(
        cls, properties: Mapping[PropertyKey, PropertyValue]
    ) -> Optional["MdnsObservation"]:
        """Build an observation from a decoded or raw TXT property mapping."""
        fields: Dict[str, str] = {}
        for raw_key, raw_value in properties.items():
            if raw_value is None:
                continue
            try:
                key = raw_key.decode("utf-8") if isinstance(raw_key, bytes) else raw_key
                value = raw_value.decode("utf-8") if isinstance(raw_value, bytes) else raw_value
            except UnicodeDecodeError:
                return None
            fields[key] = value
        return cls._from_fields(fields)

    @classmethod
    def _from_fields(cls, fields: Mapping[str, str]) -> Optional["MdnsObservation"]:
        if any(key not in fields for key in REQUIRED_KEYS):
            return None

        epoch = _parse_unsigned(fields[EPOCH_KEY])
        pid = _parse_unsigned(fields[PID_KEY])
        if epoch is None or pid is None:
            return None

        try:
            return cls(
                hostname=fields[HOSTNAME_KEY],
                project_name=fields[PROJECT_NAME_KEY],
                device_name=fields[DEVICE_NAME_KEY],
                device_id=fields[DEVICE_ID_KEY],
                target_platform=fields[TARGET_PLATFORM_KEY],
                mode=fields[MODE_KEY],
                ws_uri=fields[WS_URI_KEY],
                epoch=epoch,
                pid=pid,
                flutter_version=fields[FLUTTER_VERSION_KEY],
                dart_version=fields[DART_VERSION_KEY],
                dtd_uri=fields.get(DTD_URI_KEY),
            )
        except ValueError:
            return None


__all__ = [
    "DTD_URI_KEY",
    "REQUIRED_KEYS",
    "MdnsObservation",
    "iter_record_entries",
]
