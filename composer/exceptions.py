"""Custom exceptions for the composition engine."""

from typing import Optional


class ComposerError(Exception):
    """Base exception for all composition engine errors."""

    pass


class ConfigurationError(ComposerError):
    """Error in engine configuration."""

    pass


class ElementRegistrationError(ComposerError):
    """Error declaring or registering an Element type."""

    pass


class UnknownElementError(ElementRegistrationError):
    """No Element type is registered for a discriminant."""

    def __init__(self, discriminant: str):
        self.discriminant = discriminant
        super().__init__(f"No element type registered for discriminant {discriminant!r}")


class DuplicateRendererError(ComposerError):
    """Two renderers registered for the same discriminant in one engine."""

    def __init__(self, discriminant: str):
        self.discriminant = discriminant
        super().__init__(f"A renderer is already registered for {discriminant!r}")


class SegmentError(ComposerError):
    """Invalid operation on a Segment (e.g. renaming an attached segment)."""

    pass


class RenderError(ComposerError):
    """Error raised by a Renderer while expanding a segment.

    Opaque to the engine, which only forwards it.
    """

    pass


class NotFoundError(RenderError):
    """A required context query found no matching segments."""

    def __init__(self, discriminant: str, detail: Optional[str] = None):
        self.discriminant = discriminant
        message = f"Missing required context: {discriminant}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class TypeMismatchError(RenderError):
    """A segment's element is not of the requested type."""

    pass


class CompositionAbortedError(ComposerError):
    """Composition stopped at the first renderer failure.

    Attributes:
        cause: The RenderError raised by the renderer
        segment_id: Id of the segment being expanded
        discriminant: Discriminant of that segment's element
    """

    def __init__(self, cause: RenderError, segment_id: int, discriminant: str):
        self.cause = cause
        self.segment_id = segment_id
        self.discriminant = discriminant
        super().__init__(
            f"Composition aborted while rendering segment {segment_id} "
            f"({discriminant}): {cause}"
        )


class SerializationError(ComposerError):
    """Error converting a composition to or from its persisted form."""

    pass
