"""Converter interface for downstream consumers of compositions."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from composer.interfaces.reader import ICompositionReader


class ICompositionConverter(ABC):
    """Turns a finished composition into another representation.

    Implemented by serializers here and by external collaborators such as
    MIDI or audio converters.
    """

    @abstractmethod
    def convert(self, composition: "ICompositionReader") -> Any:
        """Convert a fully expanded composition.

        Args:
            composition: Composition to read from

        Returns:
            Converted representation (format defined by the implementation)

        Raises:
            SerializationError: If the composition cannot be represented
        """
        pass
