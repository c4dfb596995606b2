"""Cache-or-render protocol for placeholder requests.

:class:`PlaceholderService` is the only component that talks to both the
image store and the composer.  For every validated request it:

1. computes the fingerprint of the :class:`RequestSpec`,
2. returns the stored bytes unchanged on a cache hit,
3. otherwise renders the image, stores it, and returns it.

Concurrent identical requests on a cold cache may both render and both write.
The store keeps whichever write lands last; both are complete images.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from starlette.concurrency import run_in_threadpool

from platzhalter.core.composer import render_placeholder
from platzhalter.core.errors import StoreWriteError
from platzhalter.core.fingerprint import fingerprint
from platzhalter.core.image_cache import ImageCache
from platzhalter.core.request_spec import RequestSpec

logger = logging.getLogger(__name__)

RenderFn = Callable[[RequestSpec], bytes]


class PlaceholderService:
    """Serves placeholder images from the cache, rendering on a miss.

    Attributes:
        cache (ImageCache):
            Store that holds previously rendered images.
        render (RenderFn):
            Turns a request into encoded image bytes.
        strict_cache_writes (bool):
            When True a failed cache write fails the request.  When False
            the fresh render is returned anyway and the failure is logged.
    """

    def __init__(
        self,
        cache: ImageCache,
        render: RenderFn | None = None,
        *,
        strict_cache_writes: bool = True,
    ) -> None:
        self.cache = cache
        self.render = render or render_placeholder
        self.strict_cache_writes = strict_cache_writes

    @classmethod
    def from_config(cls, cache: ImageCache, config) -> PlaceholderService:
        """Build a service whose renderer uses the configured fonts and watermark."""

        def render(spec: RequestSpec) -> bytes:
            return render_placeholder(
                spec,
                label_font=config.label_font,
                watermark_font=config.watermark_font,
                watermark_text=config.watermark_text,
            )

        return cls(cache, render, strict_cache_writes=config.strict_cache_writes)

    def serve(self, spec: RequestSpec) -> bytes:
        """Return the encoded image for ``spec``.

        Raises:
            StoreReadError: The cache lookup failed.
            RenderError: Rendering failed.
            StoreWriteError: Storing the render failed and
                ``strict_cache_writes`` is enabled.
        """
        key = fingerprint(spec)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {spec.raw_dimensions} ({key})")
            return cached

        logger.debug(f"Cache miss for {spec.raw_dimensions} ({key})")
        data = self.render(spec)

        try:
            self.cache.put(key, data)
        except StoreWriteError:
            if self.strict_cache_writes:
                raise
            logger.warning(f"Returning uncached render for {spec.raw_dimensions} ({key})")

        return data

    async def serve_async(self, spec: RequestSpec) -> bytes:
        """Run :meth:`serve` on the threadpool so rendering never blocks the event loop."""
        return await run_in_threadpool(self.serve, spec)
