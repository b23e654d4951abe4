from loralink_compost.runtime.clock import Clock, FakeClock, RealClock
from loralink_compost.runtime.logging import JsonlLogger

__all__ = ["Clock", "RealClock", "FakeClock", "JsonlLogger"]
