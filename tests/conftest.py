import numpy as np
import pytest

from thermalsentinel.model.records import AlertRecord, LiveStatus, ThermalFrame


def frame_from_grid(grid, frame_index=0, min_temp=None, max_temp=None) -> ThermalFrame:
    grid = np.asarray(grid, dtype=float)
    height, width = grid.shape
    return ThermalFrame(
        frame_index=frame_index,
        width=width,
        height=height,
        pixels=grid.ravel(),
        min_temp=float(grid.min()) if min_temp is None else min_temp,
        max_temp=float(grid.max()) if max_temp is None else max_temp,
    )


@pytest.fixture
def ramp_frame() -> ThermalFrame:
    """5x4 field rising one degree per column and half a degree per row."""
    rows, cols = np.mgrid[0:4, 0:5]
    return frame_from_grid(20.0 + cols + 0.5 * rows)


@pytest.fixture
def make_frame():
    return frame_from_grid


def make_status(max_temp: float, last_update: float = 1_700_000_000.0) -> LiveStatus:
    return LiveStatus(
        last_update=last_update,
        turbine_token="a1b2c3-turbine",
        mode="SCANNING",
        current_angle=12.5,
        current_max_temp=max_temp,
        is_online=True,
    )


def make_alert(timestamp: float, max_temp: float = 70.0, alert_id: str = "") -> AlertRecord:
    return AlertRecord(
        id=alert_id or f"alert-{int(timestamp)}",
        timestamp=timestamp,
        turbine_token="a1b2c3-turbine",
        max_temp=max_temp,
        angle=45.0,
        dataset_path="scan_001",
    )
