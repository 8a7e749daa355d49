"""Element payload types and their process-wide discriminant registry.

Every payload that can occupy a composition tree node is an ``Element``: a
frozen pydantic model declared with an explicit discriminant::

    @element("Beat")
    class Beat(Element):
        accent: bool = False

The discriminant identifies the type for renderer dispatch and for the
tagged-union persisted form.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, Iterator, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from composer.exceptions import ElementRegistrationError, SerializationError, UnknownElementError

if TYPE_CHECKING:
    from composer.segment import Segment

logger = logging.getLogger(__name__)

# Key holding the discriminant in serialized element payloads
TYPE_KEY = "type"

E = TypeVar("E", bound="Element")

_registry: Dict[str, Type["Element"]] = {}


class Element(BaseModel):
    """Base class for composition tree payloads."""

    model_config = ConfigDict(frozen=True)

    discriminant: ClassVar[str] = ""

    def wrapped_element(self) -> Optional["Element"]:
        """Return the element this one wraps, if any.

        Wrapped elements are rendered alongside their wrapper and are
        matched by context queries for the wrapped type.
        """
        return None

    def element_chain(self) -> Iterator["Element"]:
        """Yield this element followed by every element it (transitively) wraps."""
        current: Optional[Element] = self
        while current is not None:
            yield current
            current = current.wrapped_element()

    def element_as(self, element_type: Type[E]) -> Optional[E]:
        """Return the first element in the wrap chain of the given type."""
        for candidate in self.element_chain():
            if isinstance(candidate, element_type):
                return candidate
        return None

    def over(self, timing: Any) -> "Segment":
        """Create an unattached Segment of this element spanning ``timing``."""
        from composer.segment import Segment

        return Segment(self, timing)

    def named(self, name: str, timing: Any) -> "Segment":
        """Create a named Segment; same-named siblings share their random seed."""
        from composer.segment import Segment

        return Segment(self, timing, name=name)


def element(discriminant: str) -> Callable[[Type[E]], Type[E]]:
    """Class decorator registering an Element subclass under a discriminant.

    Args:
        discriminant: Process-wide unique tag for the type

    Returns:
        Decorator returning the class unchanged apart from its discriminant

    Raises:
        ElementRegistrationError: If the discriminant is empty or taken, the
            class is not an Element, or it declares a reserved field
    """
    if not discriminant:
        raise ElementRegistrationError("Element discriminant must be a non-empty string")

    def register(cls: Type[E]) -> Type[E]:
        if not (isinstance(cls, type) and issubclass(cls, Element)):
            raise ElementRegistrationError(
                f"{cls!r} must subclass Element to be registered as {discriminant!r}"
            )
        if TYPE_KEY in cls.model_fields:
            raise ElementRegistrationError(
                f"{cls.__qualname__} declares reserved field {TYPE_KEY!r}"
            )

        existing = _registry.get(discriminant)
        if existing is not None and not _same_declaration(existing, cls):
            raise ElementRegistrationError(
                f"Discriminant {discriminant!r} already registered by "
                f"{existing.__module__}.{existing.__qualname__}"
            )

        cls.discriminant = discriminant
        _registry[discriminant] = cls
        logger.debug(f"Registered element type {discriminant!r} ({cls.__qualname__})")
        return cls

    return register


def _same_declaration(a: type, b: type) -> bool:
    # A reloaded module re-declares the same class under the same name
    return a.__module__ == b.__module__ and a.__qualname__ == b.__qualname__


def get_element_type(discriminant: str) -> Type[Element]:
    """Look up the Element type registered for a discriminant.

    Raises:
        UnknownElementError: If nothing is registered under it
    """
    try:
        return _registry[discriminant]
    except KeyError:
        raise UnknownElementError(discriminant) from None


def registered_elements() -> Dict[str, Type[Element]]:
    """Return a copy of the discriminant registry."""
    return dict(_registry)


def discriminant_of(value: Union[str, Element, Type[Element]]) -> str:
    """Resolve the discriminant of an Element type, instance or raw tag.

    Raises:
        ElementRegistrationError: If the type was never registered
    """
    if isinstance(value, str):
        return value
    cls = value if isinstance(value, type) else type(value)
    discriminant = cls.__dict__.get("discriminant")
    if not discriminant or _registry.get(discriminant) is not cls:
        raise ElementRegistrationError(
            f"{cls.__qualname__} is not a registered element type (missing @element)"
        )
    return discriminant


def dump_element(value: Element) -> Dict[str, Any]:
    """Serialize an element as a tagged dictionary ``{"type": ..., **fields}``."""
    payload = value.model_dump(mode="json")
    return {TYPE_KEY: discriminant_of(value), **payload}


def load_element(data: Dict[str, Any]) -> Element:
    """Rebuild an element from its tagged dictionary form.

    Raises:
        SerializationError: If the tag is missing or unknown, or the payload
            fails validation
    """
    if not isinstance(data, dict) or TYPE_KEY not in data:
        raise SerializationError(f"Element payload missing {TYPE_KEY!r} tag: {data!r}")

    fields = dict(data)
    discriminant = fields.pop(TYPE_KEY)
    try:
        cls = get_element_type(discriminant)
        return cls.model_validate(fields)
    except UnknownElementError as e:
        raise SerializationError(str(e)) from e
    except ValidationError as e:
        raise SerializationError(f"Invalid {discriminant} payload: {e}") from e
