"""Waste classification models shared by the adapter and response generator."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class WasteCategory(str, Enum):
    ORGANIC = "organic"
    RECYCLABLE = "recyclable"
    SOLID = "solid"
    UNKNOWN = "unknown"


class BinType(str, Enum):
    GREEN = "green"
    BLUE = "blue"
    UNKNOWN = "unknown"


class WasteType(str, Enum):
    DECOMPOSABLE = "decomposable"
    NON_DECOMPOSABLE = "non-decomposable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class WasteAnalysisResult:
    """Raw result returned by the external image classifier.

    Attributes:
        category: Coarse waste category.
        sub_types: Ordered list of detected item types, most prominent first.
        confidence: Classifier confidence in [0, 1].
    """

    category: WasteCategory
    sub_types: List[str] = field(default_factory=list)
    confidence: float = 0.0


@dataclass(frozen=True)
class WasteClassification:
    """Normalized classification used to render the analysis reply."""

    bin_type: BinType
    waste_type: WasteType
    detected_issue: str
    confidence: float

    @property
    def is_identified(self) -> bool:
        return self.bin_type is not BinType.UNKNOWN

    @property
    def confidence_percent(self) -> int:
        return int(math.floor(self.confidence * 100 + 0.5))
