"""Exception hierarchy for Platzhalter.

Errors fall into two families that the HTTP layer maps to status codes:

- :class:`RequestError` — the request itself is unusable (400).  The message
  is shown to the caller verbatim.
- :class:`ServiceError` — the store or the renderer failed (500).

Color parsing errors form a third family.  They are raised by
:func:`platzhalter.core.color.parse_hex` but never escape query parsing,
because malformed optional colors are treated as absent.
"""


class PlatzhalterError(Exception):
    """Base class for all Platzhalter errors."""

    pass


# -- Request errors ---------------------------------------------------------


class RequestError(PlatzhalterError):
    """User-facing validation error for a single request."""

    pass


class InvalidDimensionFormat(RequestError):
    """Dimension text does not look like ``WIDTHxHEIGHT``."""

    def __init__(self, raw: str):
        super().__init__(
            f"Invalid dimensions '{raw}': expected WIDTHxHEIGHT with at least "
            "two digits per side and no leading zero"
        )
        self.raw = raw


class DimensionTooLarge(RequestError):
    """Width or height exceeds the configured maximum."""

    def __init__(self, width: int, height: int, max_dimension: int):
        super().__init__(f"max dimension is {max_dimension}x{max_dimension}, got {width}x{height}")
        self.width = width
        self.height = height
        self.max_dimension = max_dimension


class InvalidBorderSize(RequestError):
    """Border size outside of the 0-255 range."""

    pass


# -- Color errors -----------------------------------------------------------


class ColorError(PlatzhalterError):
    """A hex color string could not be parsed."""

    pass


class InvalidColorLength(ColorError):
    """The hex string is neither 3 nor 6 characters long."""

    def __init__(self, value: str):
        super().__init__(f"only hex strings of length 3 or 6 are supported, got {len(value)}")
        self.value = value


class InvalidColorHex(ColorError):
    """The hex string contains a character outside ``0-9a-fA-F``."""

    def __init__(self, value: str):
        super().__init__(f"values of the triplet must be valid hex: '{value}'")
        self.value = value


# -- Service errors ---------------------------------------------------------


class ServiceError(PlatzhalterError):
    """Server-side failure; surfaced as an internal error."""

    pass


class StoreError(ServiceError):
    pass


class StoreReadError(StoreError):
    """Reading a cached image from the store failed."""

    pass


class StoreWriteError(StoreError):
    """Writing a rendered image to the store failed."""

    pass


class RenderError(ServiceError):
    """Drawing or encoding the placeholder image failed."""

    pass
