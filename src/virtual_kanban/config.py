"""Load optional board configuration from `.virtual_kanban/config.yaml`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    AUTO_SCROLL_MARGIN,
    AUTO_SCROLL_SPEED,
    CONFIG_FILE,
    DEFAULT_BUFFER_ITEMS,
    DEFAULT_ITEM_HEIGHT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_VIEWPORT_HEIGHT,
    STATE_DIR_NAME,
)
from .io_utils import _load_data_with_error

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class BoardSettings(BaseModel):
    """Geometry and behaviour knobs shared by every column."""

    item_height: float = Field(default=DEFAULT_ITEM_HEIGHT, gt=0)
    buffer_items: int = Field(default=DEFAULT_BUFFER_ITEMS, ge=0)
    viewport_height: float = Field(default=DEFAULT_VIEWPORT_HEIGHT, gt=0)
    auto_scroll_margin: float = Field(default=AUTO_SCROLL_MARGIN, ge=0)
    auto_scroll_speed: float = Field(default=AUTO_SCROLL_SPEED, gt=0)
    defer_to_frame: bool = True
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = str(value).upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(VALID_LOG_LEVELS)}")
        return level


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def config_path(project_dir: Path) -> Path:
    return project_dir.resolve() / STATE_DIR_NAME / CONFIG_FILE


def settings_from_dict(data: dict[str, Any]) -> tuple[BoardSettings, str | None]:
    """Validate a raw config mapping.

    The settings may sit at the top level or under a ``board:`` block.

    Returns:
        A tuple of `(settings, error_message)`; on invalid input the defaults
        are returned together with the validation message.
    """
    raw = _get_nested(data, "board")
    if not isinstance(raw, dict):
        raw = {k: v for k, v in data.items() if k in BoardSettings.model_fields}
    try:
        return BoardSettings(**raw), None
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        loc = ".".join(str(part) for part in first.get("loc", ()))
        return BoardSettings(), f"{CONFIG_FILE}: {loc}: {first.get('msg', str(exc))}"


def load_board_config(project_dir: Path) -> tuple[BoardSettings, str | None]:
    """Load the optional board config file.

    Args:
        project_dir: Directory holding the `.virtual_kanban/` folder.

    Returns:
        A tuple of `(settings, error_message)`. If the file is missing, returns
        the defaults and no error.
    """
    path = config_path(project_dir)
    data, err = _load_data_with_error(path, {})
    if not path.exists():
        return BoardSettings(), None
    if err:
        return BoardSettings(), err
    return settings_from_dict(data)
