"""Wrap the external waste classifier and normalize what it returns."""

from __future__ import annotations

import asyncio
import math
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from models.session_models import ImageAttachment
from models.waste_models import (
    BinType,
    WasteAnalysisResult,
    WasteCategory,
    WasteClassification,
    WasteType,
)

LOGGER = logging.getLogger(__name__)

CATEGORY_BINS: Mapping[WasteCategory, tuple] = {
    WasteCategory.ORGANIC: (BinType.GREEN, WasteType.DECOMPOSABLE),
    WasteCategory.RECYCLABLE: (BinType.BLUE, WasteType.NON_DECOMPOSABLE),
    WasteCategory.SOLID: (BinType.BLUE, WasteType.NON_DECOMPOSABLE),
}

UNIDENTIFIED_ISSUE = "unidentified item"


class WasteAnalysisError(RuntimeError):
    """The classifier failed, timed out, or returned something unusable."""


class WasteClassifier(Protocol):
    async def classify(
        self, image_b64: bytes, *, media_type: str = ..., text_hint: Optional[str] = ...
    ) -> Dict[str, Any]:
        ...


def coerce_result(raw: Mapping[str, Any]) -> WasteAnalysisResult:
    """Build a WasteAnalysisResult from loosely typed classifier output.

    Unknown categories collapse to `unknown`; confidence is clamped to [0, 1].
    """
    try:
        category = WasteCategory(str(raw.get("category", "")).strip().lower())
    except ValueError:
        category = WasteCategory.UNKNOWN

    sub_types_raw = raw.get("sub_types") or []
    if isinstance(sub_types_raw, str):
        sub_types_raw = [sub_types_raw]
    sub_types = [str(item).strip() for item in sub_types_raw if str(item).strip()]

    try:
        confidence = float(raw.get("confidence", 0.0))
    except (TypeError, ValueError) as exc:
        raise WasteAnalysisError(f"Invalid confidence value: {raw.get('confidence')!r}") from exc
    if math.isnan(confidence):
        raise WasteAnalysisError("Confidence is NaN.")
    confidence = min(max(confidence, 0.0), 1.0)

    return WasteAnalysisResult(category=category, sub_types=sub_types, confidence=confidence)


def normalize(result: WasteAnalysisResult) -> WasteClassification:
    """Map a classifier result onto bin and decomposability."""
    bin_type, waste_type = CATEGORY_BINS.get(result.category, (BinType.UNKNOWN, WasteType.UNKNOWN))
    detected = ", ".join(result.sub_types) if result.sub_types else (
        UNIDENTIFIED_ISSUE if result.category is WasteCategory.UNKNOWN else f"{result.category.value} waste"
    )
    return WasteClassification(
        bin_type=bin_type,
        waste_type=waste_type,
        detected_issue=detected,
        confidence=result.confidence,
    )


class WasteAnalysisAdapter:
    """Call the external classifier for an attachment and return a normalized result."""

    def __init__(self, classifier: Optional[WasteClassifier], timeout: Optional[float] = 30.0) -> None:
        self.classifier = classifier
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return self.classifier is not None

    async def analyze(self, attachment: ImageAttachment, text_hint: Optional[str] = None) -> WasteAnalysisResult:
        """Return the classifier's result for `attachment`.

        Raises:
            WasteAnalysisError: If no classifier is configured, the call fails
                or times out, or the output cannot be interpreted.
        """
        if self.classifier is None:
            raise WasteAnalysisError("No waste classifier is configured.")
        call = self.classifier.classify(
            attachment.image_b64, media_type=attachment.media_type, text_hint=text_hint or None
        )
        try:
            raw = await asyncio.wait_for(call, timeout=self.timeout) if self.timeout else await call
        except asyncio.TimeoutError as exc:
            LOGGER.error("Waste classification timed out after %ss", self.timeout)
            raise WasteAnalysisError("Waste classification timed out.") from exc
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.error("Waste classification failed: %s", exc)
            raise WasteAnalysisError(str(exc)) from exc

        if not isinstance(raw, Mapping):
            raise WasteAnalysisError(f"Unexpected classifier output: {raw!r}")
        LOGGER.info(
            "Waste classification returned %s in %ss (input_tokens=%s, output_tokens=%s)",
            raw.get("category"),
            raw.get("latency"),
            raw.get("input_tokens"),
            raw.get("output_tokens"),
        )
        return coerce_result(raw)

    async def classify(self, attachment: ImageAttachment, text_hint: Optional[str] = None) -> WasteClassification:
        """Analyze and normalize in one step."""
        return normalize(await self.analyze(attachment, text_hint))
