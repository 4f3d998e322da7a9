from .dict_utils import deep_merge
from .time_utils import MonotonicClock

__all__ = ["deep_merge", "MonotonicClock"]
