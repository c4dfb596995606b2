"""Core functionality for placeholder rendering.

This module provides the core components of Platzhalter:

- **color**: Hex color parsing and perceived luminance
- **request_spec**: Validation of dimensions and styling options
- **fingerprint**: Stable, presence-sensitive cache keys
- **image_cache**: SQLite-backed store for rendered images
- **composer**: Layout computation and the Pillow renderer
- **PlatzhalterConfig**: Configuration management using Pydantic Settings

Architecture Overview
---------------------
The modules form a small dependency chain, leaves first:

1. ``color`` has no dependencies.
2. ``request_spec`` uses ``color`` for the ``bg`` and ``br`` options.
3. ``fingerprint`` serializes a ``RequestSpec``.
4. ``image_cache`` stores bytes under a fingerprint.
5. ``composer`` turns a ``RequestSpec`` into PNG bytes.

The HTTP layer in :mod:`platzhalter.api` ties them together.

Usage Example
-------------
    from platzhalter.core import build_request_spec, render_placeholder

    spec = build_request_spec("400x300", bg="222")
    png = render_placeholder(spec)
"""

from platzhalter.core.color import Color, PerceivedLuminance, parse_hex, perceived_luminance
from platzhalter.core.composer import Layout, PillowRenderer, compose, plan_layout, render_placeholder
from platzhalter.core.config import PlatzhalterConfig, config
from platzhalter.core.fingerprint import cache_key, fingerprint
from platzhalter.core.image_cache import ImageCache
from platzhalter.core.request_spec import ImageConfig, RequestSpec, build_request_spec

__all__ = [
    "Color",
    "PerceivedLuminance",
    "parse_hex",
    "perceived_luminance",
    "Layout",
    "PillowRenderer",
    "compose",
    "plan_layout",
    "render_placeholder",
    "PlatzhalterConfig",
    "config",
    "cache_key",
    "fingerprint",
    "ImageCache",
    "ImageConfig",
    "RequestSpec",
    "build_request_spec",
]
