"""Virtual windowing: visible ranges, render diffs and frame coalescing."""

from .frame import FrameScheduler
from .render_diff import ApplyResult, HandleStatus, HandleSurface, RenderDiff, RenderDiffTracker, diff
from .windowing import GeometryError, ViewportWindow, WindowState, compute_visible_range, scroll_extent

__all__ = [
    "ApplyResult",
    "FrameScheduler",
    "GeometryError",
    "HandleStatus",
    "HandleSurface",
    "RenderDiff",
    "RenderDiffTracker",
    "ViewportWindow",
    "WindowState",
    "compute_visible_range",
    "diff",
    "scroll_extent",
]
