# Monitoring services
from glucos.services.event_store import EventStore, StoreSnapshot
from glucos.services.monitor import PatientMonitor, build_monitor
from glucos.services.reading_generator import ReadingGenerator

__all__ = [
    "EventStore",
    "PatientMonitor",
    "ReadingGenerator",
    "StoreSnapshot",
    "build_monitor",
]
