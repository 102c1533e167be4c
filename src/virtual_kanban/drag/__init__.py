"""Drag-reorder session engine and drop-zone geometry."""

from .layout import DropZoneLayout, Rect
from .session import (
    AbortDrag,
    DragResult,
    DragSession,
    DragSessionEngine,
    DragState,
    DropRequest,
    PointerDown,
    PointerMove,
    PointerSample,
    PointerUp,
    Preview,
)

__all__ = [
    "AbortDrag",
    "DragResult",
    "DragSession",
    "DragSessionEngine",
    "DragState",
    "DropRequest",
    "DropZoneLayout",
    "PointerDown",
    "PointerMove",
    "PointerSample",
    "PointerUp",
    "Preview",
    "Rect",
]
