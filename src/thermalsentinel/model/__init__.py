from thermalsentinel.model.records import (
    AlertRecord, DataFile, EvolutionPoint, HistoryPoint, LiveStatus, RemoteConfig, ThermalFrame
)

__all__ = [
    "AlertRecord",
    "DataFile",
    "EvolutionPoint",
    "HistoryPoint",
    "LiveStatus",
    "RemoteConfig",
    "ThermalFrame",
]
