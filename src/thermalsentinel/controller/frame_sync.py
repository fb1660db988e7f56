"""
Frame Selection & Synchronisation
=================================
Owns the selected dataset, frame index and view mode, and decides which
fetched frame may be displayed.

Why is this file needed?
------------------------
Fetches complete out of order when the user drags the frame slider. Every
fetch is described by a FrameRequest ticket; only the ticket issued last may
write the displayed frame, everything older is dropped silently.

States: NO_SELECTION -> LOADING -> READY, with ERROR reachable from LOADING.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Optional, Sequence

from thermalsentinel.model.records import EvolutionPoint, ThermalFrame

logger = logging.getLogger(__name__)

MATRIX_UNAVAILABLE_MESSAGE = (
    "Detailed matrix view is not available: the backend could not deliver this frame."
)


class SyncState(StrEnum):
    NO_SELECTION = "no_selection"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ViewMode(StrEnum):
    OVERVIEW = "overview"
    RASTER = "2d"
    TERRAIN = "3d"
    ADVISORY = "ai"

    @property
    def needs_frame(self) -> bool:
        return self is not ViewMode.OVERVIEW


@dataclass(frozen=True)
class FrameRequest:
    request_id: int
    dataset: str
    frame_index: int


@dataclass(frozen=True)
class EvolutionRequest:
    request_id: int
    dataset: str


Listener = Callable[["FrameSyncController"], None]


class FrameSyncController:
    """
    Pure state holder; the GUI performs the actual fetches.

    Args:
        on_frame_request: Called with every FrameRequest that should be fetched.
        on_evolution_request: Called with every EvolutionRequest that should be fetched.
    """

    def __init__(
        self,
        on_frame_request: Optional[Callable[[FrameRequest], None]] = None,
        on_evolution_request: Optional[Callable[[EvolutionRequest], None]] = None,
    ) -> None:
        self._on_frame_request = on_frame_request
        self._on_evolution_request = on_evolution_request
        self._ids = itertools.count(1)
        self._listeners: list[Listener] = []

        self.dataset: Optional[str] = None
        self.frame_index: int = 0
        self.view_mode: ViewMode = ViewMode.OVERVIEW
        self.evolution: list[EvolutionPoint] = []
        self.frame: Optional[ThermalFrame] = None
        self.error: Optional[str] = None
        self.state: SyncState = SyncState.NO_SELECTION

        self._pending_frame: Optional[FrameRequest] = None
        self._pending_evolution: Optional[EvolutionRequest] = None
        # Set while showing a frame opened from disk; nothing is fetched then
        self.local_source: Optional[str] = None

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    @property
    def frame_count(self) -> int:
        return len(self.evolution)

    @property
    def max_frame_index(self) -> int:
        return max(self.frame_count - 1, 0)

    @property
    def pending_frame(self) -> Optional[FrameRequest]:
        return self._pending_frame

    def clamp_index(self, index: int) -> int:
        """Bound an index to [0, frame_count - 1]; only 0 is valid before the evolution is known."""
        return max(0, min(int(index), self.max_frame_index))

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------------------
    # Selection changes
    # ------------------------------------------------------------------------------

    def select_dataset(self, dataset: str) -> Optional[FrameRequest]:
        """Switch dataset: back to frame 0, forget the shown frame and error, refetch."""
        logger.info(f"Selecting dataset '{dataset}'.")
        self.dataset = dataset
        self.local_source = None
        self.frame_index = 0
        self.frame = None
        self.error = None
        self.evolution = []
        self._pending_frame = None

        self._pending_evolution = EvolutionRequest(next(self._ids), dataset)
        if self._on_evolution_request:
            self._on_evolution_request(self._pending_evolution)

        request = self._request_frame_if_needed()
        if request is None:
            self.state = SyncState.READY
        self._notify()
        return request

    def select_frame(self, index: int) -> Optional[FrameRequest]:
        """Move to another frame. The current frame stays visible until the new one arrives."""
        if self.dataset is None or self.local_source is not None:
            return None
        bounded = self.clamp_index(index)
        if bounded != index:
            logger.debug(f"Frame index {index} clamped to {bounded}.")
        if bounded == self.frame_index and (self._pending_frame or self._frame_is_current()):
            return None
        self.frame_index = bounded
        self._pending_frame = None
        request = self._request_frame_if_needed()
        self._notify()
        return request

    def open_local(self, frame: ThermalFrame, source: str) -> None:
        """
        Show a frame loaded from a file. In-flight fetches for the previous
        dataset become stale; the slider is pinned to a single frame until
        another dataset is selected.
        """
        logger.info(f"Showing local frame from '{source}'.")
        self.local_source = source
        self.dataset = source
        self.frame_index = 0
        self.frame = frame
        self.error = None
        self.evolution = [
            EvolutionPoint(frame_index=0, max_temp=frame.max_temp, avg_temp=float(frame.pixels.mean()))
        ]
        self._pending_frame = None
        self._pending_evolution = None
        self.state = SyncState.READY
        self._notify()

    def set_view_mode(self, mode: ViewMode) -> Optional[FrameRequest]:
        self.view_mode = ViewMode(mode)
        if self.dataset is None:
            self._notify()
            return None
        request = None
        if self._pending_frame is None and not self._frame_is_current():
            request = self._request_frame_if_needed()
        self._notify()
        return request

    # ------------------------------------------------------------------------------
    # Fetch completion (called on the GUI thread)
    # ------------------------------------------------------------------------------

    def resolve(self, request: FrameRequest, frame: ThermalFrame) -> bool:
        """Display the frame if `request` is still the latest one. Returns True if applied."""
        if not self._is_latest(request):
            logger.debug(f"Discarding stale frame {request.dataset}#{request.frame_index}.")
            return False
        self._pending_frame = None
        self.frame = frame
        self.error = None
        self.state = SyncState.READY
        self._notify()
        return True

    def fail(self, request: FrameRequest, error: str | Exception) -> bool:
        """Replace the shown frame with an error placeholder if `request` is still the latest one."""
        if not self._is_latest(request):
            logger.debug(f"Ignoring failure of stale request {request.dataset}#{request.frame_index}.")
            return False
        logger.warning(f"Frame {request.dataset}#{request.frame_index} unavailable: {error}")
        self._pending_frame = None
        self.frame = None
        self.error = MATRIX_UNAVAILABLE_MESSAGE
        self.state = SyncState.ERROR
        self._notify()
        return True

    def resolve_evolution(self, request: EvolutionRequest, points: Sequence[EvolutionPoint]) -> bool:
        if request != self._pending_evolution:
            logger.debug(f"Discarding stale evolution for '{request.dataset}'.")
            return False
        self._pending_evolution = None
        self.evolution = sorted(points, key=lambda p: p.frame_index)
        bounded = self.clamp_index(self.frame_index)
        if bounded != self.frame_index:
            self.select_frame(bounded)
        self._notify()
        return True

    def fail_evolution(self, request: EvolutionRequest, error: str | Exception) -> bool:
        if request != self._pending_evolution:
            return False
        logger.warning(f"Evolution for '{request.dataset}' unavailable: {error}")
        self._pending_evolution = None
        self.evolution = []
        self._notify()
        return True

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _frame_is_current(self) -> bool:
        return self.frame is not None and self.frame.frame_index == self.frame_index

    def _is_latest(self, request: FrameRequest) -> bool:
        latest = self._pending_frame
        return (
            latest is not None
            and request.request_id == latest.request_id
            and request.dataset == self.dataset
            and request.frame_index == self.frame_index
        )

    def _request_frame_if_needed(self) -> Optional[FrameRequest]:
        if self.dataset is None or self.local_source is not None or not self.view_mode.needs_frame:
            return None
        request = FrameRequest(next(self._ids), self.dataset, self.frame_index)
        self._pending_frame = request
        self.state = SyncState.LOADING
        if self._on_frame_request:
            self._on_frame_request(request)
        return request

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)
