"""
Input/Output Manager (HDF5)
Handles exporting and re-loading thermal frames as .h5 files.
"""
import logging
from importlib.metadata import version, PackageNotFoundError

import h5py
import numpy as np

from thermalsentinel.model.records import ThermalFrame

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("thermalsentinel")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class IOManager:
    @staticmethod
    def save_frame(frame: ThermalFrame, filepath: str, dataset: str = "") -> None:
        """Write one frame; pixels as a gzip (height, width) dataset, scalars as attributes."""
        logger.info(f"Saving frame {frame.frame_index} to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["dataset"] = dataset
                f.attrs["frame_index"] = frame.frame_index
                f.attrs["min_temp"] = frame.min_temp
                f.attrs["max_temp"] = frame.max_temp
                f.create_dataset("pixels", data=frame.as_grid(), compression="gzip")
        except OSError as e:
            logger.exception(f"Failed to save frame: {e}")
            raise

    @staticmethod
    def load_frame(filepath: str) -> ThermalFrame:
        logger.info(f"Loading frame from: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        with h5py.File(filepath, "r") as f:
            if "pixels" not in f:
                raise ValueError(f"File '{filepath}' does not contain a thermal frame.")
            grid = np.asarray(f["pixels"][()], dtype=np.float64)
            if grid.ndim != 2:
                raise ValueError(f"Expected a 2D pixel dataset, got shape {grid.shape}.")
            height, width = grid.shape
            return ThermalFrame(
                frame_index=int(f.attrs["frame_index"]),
                width=width,
                height=height,
                pixels=grid.ravel(),
                min_temp=float(f.attrs["min_temp"]),
                max_temp=float(f.attrs["max_temp"]),
            )
