"""
Backend API Client
==================
Thin wrapper over the telemetry backend's REST endpoints.

Why is this file needed?
------------------------
1. Single place for transport concerns (base URL, timeouts, JSON decoding).
2. Every failure mode of the network is folded into one exception type,
   ApiError, so callers can degrade a single view instead of crashing.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

import requests

from thermalsentinel.config import API_BASE_URL, REQUEST_TIMEOUT_S
from thermalsentinel.model.records import (
    AlertRecord, DataFile, EvolutionPoint, LiveStatus, RemoteConfig, ThermalFrame
)
from thermalsentinel.model.synthetic import synthetic_frame

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiError(Exception):
    """Raised when an endpoint is unreachable, answers non-2xx, or sends garbage."""

    def __init__(self, endpoint: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.status_code = status_code


class ApiClient:
    """
    Synchronous client; run it on a worker thread from the GUI.

    Args:
        base_url: Backend root, e.g. "http://host:8080/api".
        timeout: Per-request timeout in seconds.
        session: Optional pre-configured requests.Session (tests inject fakes).
        synthetic_fallback: When True, a failed matrix fetch returns a generated
            frame instead of raising. Off by default.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_S,
        session: Optional[requests.Session] = None,
        synthetic_fallback: bool = False,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.synthetic_fallback = synthetic_fallback

    # ------------------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------------------

    def _request(self, method: str, endpoint: str, payload: Any = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Connection error with {url}: {e}")
            raise ApiError(endpoint, f"connection failed ({e})") from e

        if not response.ok:
            logger.warning(f"Server error from {url}: {response.status_code} {response.reason}")
            raise ApiError(endpoint, f"server error {response.status_code} {response.reason}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(endpoint, "response is not valid JSON") from e

    def _parse(self, endpoint: str, data: Any, parser: Callable[[Any], T]) -> T:
        try:
            return parser(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise ApiError(endpoint, f"unexpected payload ({e})") from e

    def _parse_list(self, endpoint: str, data: Any, parser: Callable[[Any], T]) -> list[T]:
        if not isinstance(data, list):
            raise ApiError(endpoint, "expected a JSON array")
        return [self._parse(endpoint, item, parser) for item in data]

    # ------------------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------------------

    def get_live_status(self) -> LiveStatus:
        data = self._request("GET", "/live")
        return self._parse("/live", data, LiveStatus.from_dict)

    def get_alerts(self) -> list[AlertRecord]:
        data = self._request("GET", "/alerts")
        return self._parse_list("/alerts", data, AlertRecord.from_dict)

    def get_evolution(self, dataset: str) -> list[EvolutionPoint]:
        endpoint = f"/evolution/{dataset}"
        data = self._request("GET", endpoint)
        return self._parse_list(endpoint, data, EvolutionPoint.from_dict)

    def get_thermal_matrix(self, dataset: str, frame_index: int) -> ThermalFrame:
        endpoint = f"/matrix/{dataset}/{frame_index}"
        try:
            data = self._request("GET", endpoint)
            return self._parse(endpoint, data, ThermalFrame.from_dict)
        except ApiError:
            if not self.synthetic_fallback:
                raise
            logger.warning(f"Matrix API failed for {dataset}#{frame_index}, using synthetic frame.")
            return synthetic_frame(frame_index)

    def get_config(self) -> RemoteConfig:
        data = self._request("GET", "/config")
        return self._parse("/config", data, RemoteConfig.from_dict)

    def update_config(self, config: RemoteConfig) -> Any:
        return self._request("POST", "/config", payload=config.to_dict())

    def list_files(self) -> list[DataFile]:
        data = self._request("GET", "/files")
        return self._parse_list("/files", data, DataFile.from_dict)
