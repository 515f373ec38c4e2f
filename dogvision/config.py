"""
Configuration module for DogVision.

Settings are read from YAML (config/settings.yaml by default) into
dataclasses. Command-line flags override individual values after
loading.

Example settings.yaml:
    model: canine
    video:
      device_index: 0
      fps: 30
    display:
      max_width: 1280
    logging:
      level: INFO
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger

from dogvision.core.contracts import ColorModel

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"


@dataclass
class VideoConfig:
    """Live source settings.

    Attributes:
        device_index: Default camera index
        video_file: Play this file instead of a camera (None = camera)
        width: Requested capture width
        height: Requested capture height
        fps: Requested capture rate, also the tick rate of the live loop
        max_read_failures: Consecutive failed reads before a camera is
            considered gone
        playback_speed: Video file playback speed multiplier
        loop: Loop video file playback
    """
    device_index: int = 0
    video_file: Optional[str] = None
    width: int = 1280
    height: int = 720
    fps: int = 30
    max_read_failures: int = 30
    playback_speed: float = 1.0
    loop: bool = False


@dataclass
class DisplayConfig:
    """Display sink settings."""
    sink: str = "opencv"  # opencv | headless
    window_name: str = "DogVision"
    max_width: int = 1920
    image_format: str = "PNG"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration.

    Attributes:
        model: Default simulation model name ("canine" or "dichromatic")
        video: Live source settings
        display: Display sink settings
        logging: Log level and optional log file
    """
    model: str = ColorModel.CANINE.value
    video: VideoConfig = field(default_factory=VideoConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def color_model(self) -> ColorModel:
        return ColorModel.from_name(self.model)


def _build(cls, values: Optional[Dict[str, Any]], section: str):
    """Instantiate a config dataclass, ignoring unknown keys."""
    if not values:
        return cls()
    if not isinstance(values, dict):
        logger.warning(f"Config section '{section}' is not a mapping, using defaults")
        return cls()

    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        logger.warning(f"Ignoring unknown config keys in '{section}': {', '.join(sorted(unknown))}")
    return cls(**{k: v for k, v in values.items() if k in known})


def config_from_dict(data: Optional[Dict[str, Any]]) -> Config:
    """Build a Config from a parsed YAML mapping."""
    data = data or {}
    config = Config(
        model=str(data.get('model', ColorModel.CANINE.value)),
        video=_build(VideoConfig, data.get('video'), 'video'),
        display=_build(DisplayConfig, data.get('display'), 'display'),
        logging=_build(LoggingConfig, data.get('logging'), 'logging'),
    )
    # Fail early on a bad model name
    config.color_model
    return config


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """Load configuration from a YAML file.

    Args:
        config_path: Explicit file. Falls back to config/settings.yaml,
            then to built-in defaults.

    Returns:
        Config object with all settings
    """
    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            return config_from_dict(yaml.safe_load(f))

    if config_path:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    if DEFAULT_CONFIG_PATH.exists():
        with open(DEFAULT_CONFIG_PATH) as f:
            return config_from_dict(yaml.safe_load(f))

    return Config()
