from .time_tracker import TimeTracker, TimeTrackerError

__all__ = ["TimeTracker", "TimeTrackerError"]
