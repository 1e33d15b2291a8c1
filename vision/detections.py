"""Convert object-detector output into ``DetectedObject`` values."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from domain.models import BoundingBox, DetectedObject


def _bbox(raw: Any) -> Optional[BoundingBox]:
    if raw is None:
        return None
    if isinstance(raw, BoundingBox):
        return raw
    if isinstance(raw, dict):
        return BoundingBox(
            x=float(raw.get("x", raw.get("origin_x", 0.0))),
            y=float(raw.get("y", raw.get("origin_y", 0.0))),
            w=float(raw.get("w", raw.get("width", 0.0))),
            h=float(raw.get("h", raw.get("height", 0.0))),
        )
    # MediaPipe tasks BoundingBox: origin_x / origin_y / width / height
    return BoundingBox(
        x=float(getattr(raw, "origin_x", 0.0)),
        y=float(getattr(raw, "origin_y", 0.0)),
        w=float(getattr(raw, "width", 0.0)),
        h=float(getattr(raw, "height", 0.0)),
    )


def _detection(raw: Any) -> Optional[DetectedObject]:
    if isinstance(raw, DetectedObject):
        return raw
    if isinstance(raw, dict):
        name = raw.get("category_name", raw.get("categoryName"))
        if name is None:
            return None
        return DetectedObject(
            category_name=str(name),
            score=float(raw.get("score", 1.0)),
            bounding_box=_bbox(raw.get("bounding_box", raw.get("boundingBox"))),
        )
    # MediaPipe tasks Detection: the top category is the label
    categories = getattr(raw, "categories", None)
    if not categories:
        return None
    top = categories[0]
    return DetectedObject(
        category_name=str(top.category_name),
        score=float(top.score),
        bounding_box=_bbox(getattr(raw, "bounding_box", None)),
    )


def parse_detections(raw: Optional[Iterable[Any]]) -> list[DetectedObject]:
    """Accept dicts, ``DetectedObject`` or MediaPipe detections; skip unlabelled."""
    if raw is None:
        return []
    out: list[DetectedObject] = []
    for item in raw:
        det = _detection(item)
        if det is not None:
            out.append(det)
    return out
