"""
Settings loading from YAML.
"""
import yaml
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional
import logging

from pydantic import BaseModel, Field

from .extractors import DEFAULT_CATEGORY_KEYWORDS
from .layout import (
    DEFAULT_LINE_HEIGHT,
    LINE_HEIGHT_NOISE,
    LINE_HEIGHT_SAMPLE_SIZE,
    LINE_TOLERANCE,
    PARAGRAPH_BREAK_FACTOR,
    SPACE_GAP,
)
from .ledger import DEFAULT_INITIAL_BALANCE

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / "config" / "default.yaml"


class LayoutSettings(BaseModel):
    """Thresholds for the layout reconstructor."""
    line_tolerance: float = LINE_TOLERANCE
    space_gap: float = SPACE_GAP
    line_height_noise: float = LINE_HEIGHT_NOISE
    line_height_sample_size: int = Field(default=LINE_HEIGHT_SAMPLE_SIZE, gt=0)
    default_line_height: float = Field(default=DEFAULT_LINE_HEIGHT, gt=0)
    paragraph_break_factor: float = Field(default=PARAGRAPH_BREAK_FACTOR, gt=0)


class LedgerSettings(BaseModel):
    initial_balance: Decimal = DEFAULT_INITIAL_BALANCE


class Settings(BaseModel):
    """Top-level settings document."""
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    categories: Dict[str, List[str]] = Field(
        default_factory=lambda: {name: list(words) for name, words in DEFAULT_CATEGORY_KEYWORDS.items()}
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        path: Settings file; the packaged ``default.yaml`` when omitted

    Returns:
        Settings object

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the file content is invalid
    """
    settings_path = path or DEFAULT_SETTINGS_PATH
    with open(settings_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    settings = Settings.model_validate(data)
    logger.debug(f"Loaded settings from {settings_path}")
    return settings
