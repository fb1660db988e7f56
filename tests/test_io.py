import h5py
import numpy as np
import pytest

from thermalsentinel.controller.frame_sync import FrameSyncController, SyncState
from thermalsentinel.model.io import IOManager


def test_save_and_load_frame(tmp_path, ramp_frame):
    path = tmp_path / "frame.h5"
    IOManager.save_frame(ramp_frame, str(path), dataset="scan_001")

    loaded = IOManager.load_frame(str(path))
    assert (loaded.width, loaded.height, loaded.frame_index) == (5, 4, 0)
    np.testing.assert_array_equal(loaded.pixels, ramp_frame.pixels)
    assert loaded.min_temp == ramp_frame.min_temp
    assert loaded.max_temp == ramp_frame.max_temp

    with h5py.File(path, "r") as f:
        assert f.attrs["dataset"] == "scan_001"
        assert f["pixels"].shape == (4, 5)


def test_load_rejects_non_hdf5(tmp_path):
    path = tmp_path / "frame.h5"
    path.write_text("not hdf5")
    with pytest.raises(ValueError):
        IOManager.load_frame(str(path))


def test_load_rejects_file_without_pixels(tmp_path):
    path = tmp_path / "empty.h5"
    with h5py.File(path, "w") as f:
        f.attrs["frame_index"] = 0
    with pytest.raises(ValueError):
        IOManager.load_frame(str(path))


def test_exported_frame_opens_in_frame_sync(tmp_path, ramp_frame):
    path = str(tmp_path / "frame.h5")
    IOManager.save_frame(ramp_frame, path, dataset="scan_001")
    sync = FrameSyncController()
    sync.open_local(IOManager.load_frame(path), path)
    assert sync.state == SyncState.READY
    np.testing.assert_array_equal(sync.frame.pixels, ramp_frame.pixels)
    assert sync.dataset == path
