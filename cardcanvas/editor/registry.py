"""Text-field registry: live objects and their design-space originals, keyed by field id."""

import logging
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .errors import DuplicateFieldError
from .models import OriginalGeometry
from .surface import RenderableText

logger = logging.getLogger(__name__)

TextChangeListener = Callable[[str, str], None]


class TextFieldRegistry:
    """
    Two parallel mappings keyed by field id.

    The original geometry map is only written by ``register``; nothing
    else in the engine mutates it.
    """

    def __init__(self):
        self._objects: Dict[str, RenderableText] = {}
        self._originals: Dict[str, OriginalGeometry] = {}
        self._listeners: List[TextChangeListener] = []

    def register(self, field_id: str, obj: RenderableText, original: OriginalGeometry) -> None:
        """
        Register a live object and its original geometry.

        Raises:
            DuplicateFieldError: if ``field_id`` is already registered, even
                if its live object has since been detached
        """
        if field_id in self._objects or field_id in self._originals:
            raise DuplicateFieldError(field_id)
        self._objects[field_id] = obj
        self._originals[field_id] = original

    def get(self, field_id: str) -> Optional[RenderableText]:
        return self._objects.get(field_id)

    def get_original(self, field_id: str) -> Optional[OriginalGeometry]:
        return self._originals.get(field_id)

    def originals(self) -> Iterator[Tuple[str, OriginalGeometry]]:
        return iter(list(self._originals.items()))

    def objects(self) -> List[RenderableText]:
        """Live objects in registration order."""
        return list(self._objects.values())

    def ids(self) -> List[str]:
        return list(self._objects.keys())

    def detach(self, field_id: str) -> Optional[RenderableText]:
        """Drop the live object for a field, keeping its original geometry."""
        return self._objects.pop(field_id, None)

    def subscribe(self, listener: TextChangeListener) -> None:
        """Add a listener called as ``listener(field_id, text)`` after each edit."""
        self._listeners.append(listener)

    def update_text(self, field_id: str, text: str) -> bool:
        """
        Replace a field's text content.

        Locked fields and unknown ids are left alone without raising.

        Returns:
            True if the text was changed
        """
        obj = self._objects.get(field_id)
        if obj is None:
            logger.debug(f"update_text: no live object for field {field_id}")
            return False
        if obj.locked:
            logger.debug(f"update_text: field {field_id} is locked")
            return False

        obj.set_text(text)
        for listener in list(self._listeners):
            listener(field_id, text)
        return True

    def clear(self) -> None:
        """Release every entry; listeners are kept."""
        self._objects.clear()
        self._originals.clear()

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, field_id: str) -> bool:
        return field_id in self._objects
