import numpy as np
import pytest

from thermalsentinel.model.records import (
    AlertRecord, DataFile, EvolutionPoint, LiveStatus, RemoteConfig, ThermalFrame, filter_files
)


def test_frame_pixels_are_read_only():
    frame = ThermalFrame(frame_index=0, width=2, height=1, pixels=[1.0, 2.0], min_temp=1.0, max_temp=2.0)
    with pytest.raises(ValueError):
        frame.pixels[0] = 5.0
    assert frame.temperature_span == 1.0


def test_frame_does_not_alias_caller_buffer():
    source = np.zeros(4)
    frame = ThermalFrame(frame_index=0, width=2, height=2, pixels=source, min_temp=0.0, max_temp=1.0)
    source[0] = 99.0
    assert frame.pixels.tolist() == [0.0, 0.0, 0.0, 0.0]

    grid = np.zeros((2, 2))
    frame = ThermalFrame(frame_index=0, width=2, height=2, pixels=grid.ravel(), min_temp=0.0, max_temp=1.0)
    grid[1, 1] = 42.0
    assert frame.pixels[3] == 0.0


@pytest.mark.parametrize("width, height, pixels", [(0, 1, []), (2, 2, [1.0, 2.0, 3.0])])
def test_frame_rejects_bad_shapes(width, height, pixels):
    with pytest.raises(ValueError):
        ThermalFrame(frame_index=0, width=width, height=height, pixels=pixels, min_temp=0.0, max_temp=1.0)


def test_frame_from_dict_accepts_nested_rows():
    frame = ThermalFrame.from_dict({
        "frame_index": 2, "width": 3, "height": 2,
        "pixels": [[1, 2, 3], [4, 5, 6]], "min_temp": 1, "max_temp": 6,
    })
    np.testing.assert_array_equal(frame.as_grid(), [[1, 2, 3], [4, 5, 6]])
    assert frame.to_dict()["pixels"] == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]


def test_missing_keys_are_reported():
    with pytest.raises(ValueError, match="current_max_temp"):
        LiveStatus.from_dict({"last_update": 0, "turbine_token": "t", "mode": "IDLE", "current_angle": 0, "is_online": 1})
    with pytest.raises(ValueError):
        EvolutionPoint.from_dict({"frame_index": 0})


def test_alert_severity_is_bounded():
    alert = AlertRecord.from_dict({"timestamp": 0, "max_temp": 140})
    assert alert.severity == 1.0
    assert AlertRecord.from_dict({"timestamp": 0, "max_temp": 65}).severity == pytest.approx(0.65)
    assert alert.dataset_path == ""


def test_remote_config_keeps_unknown_keys():
    config = RemoteConfig.from_dict({"max_temp_trigger": 70, "api_key": "k", "camera": "flir"})
    assert config.api_key == "k"
    data = config.to_dict()
    assert data["camera"] == "flir"
    assert data["max_temp_trigger"] == 70.0
    assert "extra" not in data
    assert RemoteConfig().api_key is None


def test_remote_config_validation():
    RemoteConfig(max_temp_trigger=60.0, scan_wait_time_sec=2.0, pan_step_degrees=0.5, alert_email="ops@example.com").validate()
    for bad in (
        RemoteConfig(max_temp_trigger=0.0),
        RemoteConfig(max_temp_trigger=60.0, scan_wait_time_sec=-1.0),
        RemoteConfig(max_temp_trigger=60.0, pan_step_degrees=0.0),
        RemoteConfig(max_temp_trigger=60.0, alert_email="ops.example.com"),
    ):
        with pytest.raises(ValueError):
            bad.validate()


def test_filter_files_and_size_label():
    files = [
        DataFile(name="scan_001.h5", size_kb=512.0, date="2024-05-01", type="capture"),
        DataFile(name="SCAN_002.h5", size_kb=2048.0, date="2024-05-02", type="capture"),
        DataFile(name="system.log", size_kb=3.2, date="2024-05-02", type="log"),
    ]
    assert [f.name for f in filter_files(files, "scan")] == ["scan_001.h5", "SCAN_002.h5"]
    assert filter_files(files, "  ") == files
    assert filter_files(files, "missing") == []
    assert files[0].size_label == "512 KB"
    assert files[1].size_label == "2.0 MB"
