from __future__ import annotations

from .selector import FileSelector
from .selector import select
from .selectormodel import DateProperty
from .selectormodel import FileRecord
from .selectorretention import RetentionCleaner
from .selectorrule import All
from .selectorrule import DateRange
from .selectorrule import Direction
from .selectorrule import InvalidRule
from .selectorrule import Newest
from .selectorrule import Oldest
from .selectorrule import RelativePeriod
from .selectorrule import SkipNewest
from .selectorrule import SkipOldest
from .selectorrule import TimeUnit
from .selectorwalker import FileWalker

__all__ = [
    "All",
    "DateProperty",
    "DateRange",
    "Direction",
    "FileRecord",
    "FileSelector",
    "FileWalker",
    "InvalidRule",
    "Newest",
    "Oldest",
    "RelativePeriod",
    "RetentionCleaner",
    "SkipNewest",
    "SkipOldest",
    "TimeUnit",
    "select",
]
