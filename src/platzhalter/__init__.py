"""Platzhalter - placeholder images rendered on demand and cached."""

__version__ = "0.1.0"

from platzhalter.core.color import Color, PerceivedLuminance, parse_hex
from platzhalter.core.config import PlatzhalterConfig, config
from platzhalter.core.request_spec import ImageConfig, RequestSpec, build_request_spec

__all__ = [
    "Color",
    "PerceivedLuminance",
    "parse_hex",
    "PlatzhalterConfig",
    "config",
    "ImageConfig",
    "RequestSpec",
    "build_request_spec",
]
