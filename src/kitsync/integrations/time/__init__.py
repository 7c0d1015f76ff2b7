from kitsync.integrations.time.abc import Time
from kitsync.integrations.time.real import RealTime

__all__ = [
    "RealTime",
    "Time",
]
