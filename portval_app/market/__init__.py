"""
Market simulation module.

The market bus owns the published snapshot, advances it once per tick on a
dedicated thread, and notifies subscribers in registration order.
"""

from .bus import BusState, MarketBus, SnapshotConsumer
from .schedule import TickSchedule

__all__ = ["BusState", "MarketBus", "SnapshotConsumer", "TickSchedule"]
