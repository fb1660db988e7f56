"""
Telemetry Records (Data Model)
==============================
Plain dataclasses for everything the backend sends us.

Why is this file needed?
------------------------
1. Decoupling: Controllers and views never touch raw JSON dictionaries.
2. Validation: Malformed payloads fail here with a ValueError, before they
   reach the colour mapping or the mesh builder.

Classes:
    ThermalFrame: One captured 2D temperature field.
    EvolutionPoint: Per-frame summary statistics of a dataset.
    LiveStatus: Snapshot of the scanning unit.
    AlertRecord: One historical overheat incident.
    RemoteConfig: Backend behaviour settings.
    DataFile: Entry of the backend file listing (see filter_files).
    HistoryPoint: One sample of the dashboard peak-history chart.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

import numpy as np
import numpy.typing as npt


def _require(payload: Mapping[str, Any], *keys: str) -> None:
    missing = [k for k in keys if k not in payload]
    if missing:
        raise ValueError(f"Payload is missing required keys: {', '.join(missing)}")


@dataclass(frozen=True, eq=False)
class ThermalFrame:
    """
    A 2D field of temperature samples, stored row-major.

    `pixels` is a read-only float64 array of length width*height.
    """
    frame_index: int
    width: int
    height: int
    pixels: npt.NDArray[np.float64]
    min_temp: float
    max_temp: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Frame dimensions must be positive, got {self.width}x{self.height}.")
        # Own copy: the caller keeps no writable alias to the pixel buffer
        arr = np.array(self.pixels, dtype=np.float64).ravel()
        if arr.size != self.width * self.height:
            raise ValueError(
                f"Expected {self.width * self.height} pixels for a {self.width}x{self.height} frame, got {arr.size}."
            )
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def temperature_span(self) -> float:
        return self.max_temp - self.min_temp

    def as_grid(self) -> npt.NDArray[np.float64]:
        """(height, width) view of the pixel data."""
        return self.pixels.reshape(self.height, self.width)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ThermalFrame:
        _require(payload, "frame_index", "width", "height", "pixels", "min_temp", "max_temp")
        pixels = np.asarray(payload["pixels"], dtype=np.float64)
        return cls(
            frame_index=int(payload["frame_index"]),
            width=int(payload["width"]),
            height=int(payload["height"]),
            pixels=pixels.ravel(),
            min_temp=float(payload["min_temp"]),
            max_temp=float(payload["max_temp"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "frame_index": self.frame_index,
            "width": self.width,
            "height": self.height,
            "pixels": self.pixels.tolist(),
            "min_temp": self.min_temp,
            "max_temp": self.max_temp,
        }


@dataclass(frozen=True)
class EvolutionPoint:
    frame_index: int
    max_temp: float
    avg_temp: float

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> EvolutionPoint:
        _require(payload, "frame_index", "max_temp", "avg_temp")
        return cls(
            frame_index=int(payload["frame_index"]),
            max_temp=float(payload["max_temp"]),
            avg_temp=float(payload["avg_temp"]),
        )


@dataclass(frozen=True)
class LiveStatus:
    last_update: float  # Unix timestamp
    turbine_token: str
    mode: str
    current_angle: float
    current_max_temp: float
    is_online: bool

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> LiveStatus:
        _require(payload, "last_update", "turbine_token", "mode", "current_angle", "current_max_temp", "is_online")
        return cls(
            last_update=float(payload["last_update"]),
            turbine_token=str(payload["turbine_token"]),
            mode=str(payload["mode"]),
            current_angle=float(payload["current_angle"]),
            current_max_temp=float(payload["current_max_temp"]),
            is_online=bool(payload["is_online"]),
        )

    def is_hot(self, threshold: float) -> bool:
        return self.current_max_temp > threshold

    @property
    def last_update_label(self) -> str:
        return datetime.fromtimestamp(self.last_update).strftime("%H:%M:%S")

    @property
    def short_token(self) -> str:
        return self.turbine_token.split("-")[0] + "..."


@dataclass(frozen=True)
class AlertRecord:
    id: str
    timestamp: float
    turbine_token: str
    max_temp: float
    angle: float
    dataset_path: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> AlertRecord:
        _require(payload, "timestamp", "max_temp")
        return cls(
            id=str(payload.get("id", "")),
            timestamp=float(payload["timestamp"]),
            turbine_token=str(payload.get("turbine_token", "")),
            max_temp=float(payload["max_temp"]),
            angle=float(payload.get("angle", 0.0)),
            dataset_path=str(payload.get("dataset_path", "")),
        )

    @property
    def severity(self) -> float:
        """Fraction of a 100 °C scale, used for the severity bar."""
        return min(1.0, max(0.0, self.max_temp / 100.0))


@dataclass
class RemoteConfig:
    max_temp_trigger: float = 0.0
    scan_wait_time_sec: float = 0.0
    system_enabled: bool = False
    pan_step_degrees: float = 0.5
    alert_email: str = ""
    # Unknown keys are kept so a save round-trips what the backend sent.
    extra: dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("max_temp_trigger", "scan_wait_time_sec", "system_enabled", "pan_step_degrees", "alert_email")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> RemoteConfig:
        return cls(
            max_temp_trigger=float(payload.get("max_temp_trigger", 0.0)),
            scan_wait_time_sec=float(payload.get("scan_wait_time_sec", 0.0)),
            system_enabled=bool(payload.get("system_enabled", False)),
            pan_step_degrees=float(payload.get("pan_step_degrees", 0.5)),
            alert_email=str(payload.get("alert_email", "")),
            extra={k: v for k, v in payload.items() if k not in cls._KNOWN},
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra")
        data.update(extra)
        return data

    def validate(self) -> None:
        """Reject values the scanning unit cannot act on before they are sent."""
        if not 0.0 < self.max_temp_trigger < 200.0:
            raise ValueError(f"Temperature trigger must be between 0 and 200 °C, got {self.max_temp_trigger}.")
        if self.scan_wait_time_sec < 0:
            raise ValueError("Scan wait time cannot be negative.")
        if self.pan_step_degrees <= 0:
            raise ValueError("Pan step must be positive.")
        if self.alert_email and "@" not in self.alert_email:
            raise ValueError(f"'{self.alert_email}' is not an e-mail address.")

    @property
    def api_key(self) -> Optional[str]:
        value = self.extra.get("api_key")
        return str(value) if value else None


@dataclass(frozen=True)
class DataFile:
    name: str
    size_kb: float
    date: str
    type: str  # 'capture' | 'log'

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> DataFile:
        _require(payload, "name")
        return cls(
            name=str(payload["name"]),
            size_kb=float(payload.get("size_kb", 0.0)),
            date=str(payload.get("date", "")),
            type=str(payload.get("type", "capture")),
        )

    @property
    def size_label(self) -> str:
        if self.size_kb >= 1024:
            return f"{self.size_kb / 1024:.1f} MB"
        return f"{self.size_kb:.0f} KB"


def filter_files(files: Iterable[DataFile], term: str) -> list[DataFile]:
    """Case-insensitive substring match on the file name; a blank term keeps everything."""
    needle = term.strip().lower()
    return [f for f in files if needle in f.name.lower()]


@dataclass(frozen=True)
class HistoryPoint:
    time_label: str
    timestamp: float
    temp: float

    @classmethod
    def from_alert(cls, alert: AlertRecord) -> HistoryPoint:
        label = datetime.fromtimestamp(alert.timestamp).strftime("%H:%M")
        return cls(time_label=label, timestamp=alert.timestamp, temp=alert.max_temp)
