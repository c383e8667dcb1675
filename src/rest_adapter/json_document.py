"""
JSONDocument module providing a navigable view over parsed JSON responses
"""

import copy
import json
from typing import Any, Iterator, List, Union

from .exceptions import MalformedDocumentError


class JSONDocument:
    """Wraps a parsed JSON value and exposes tree navigation helpers"""

    def __init__(self, value: Any):
        self._value = value

    @classmethod
    def parse(cls, data: Union[bytes, str]) -> "JSONDocument":
        """
        Parse raw response bytes into a document

        Args:
            data: Raw JSON bytes or text

        Returns:
            JSONDocument wrapping the parsed value

        Raises:
            MalformedDocumentError: If the input is not valid JSON
        """
        if isinstance(data, bytes):
            try:
                data = data.decode('utf-8')
            except UnicodeDecodeError as e:
                raise MalformedDocumentError(f"Response body is not valid UTF-8: {e}")

        try:
            return cls(json.loads(data))
        except json.JSONDecodeError as e:
            raise MalformedDocumentError(f"Response body is not valid JSON: {e}")

    @property
    def value(self) -> Any:
        return self._value

    @property
    def is_missing(self) -> bool:
        return False

    @property
    def is_object(self) -> bool:
        return isinstance(self._value, dict)

    @property
    def is_array(self) -> bool:
        return isinstance(self._value, list)

    def has(self, key: Union[str, int]) -> bool:
        """Return True if the key (or array index) is present"""
        if isinstance(self._value, dict):
            return key in self._value
        if isinstance(self._value, list) and isinstance(key, int):
            return -len(self._value) <= key < len(self._value)
        return False

    def get(self, key: Union[str, int]) -> "JSONDocument":
        """
        Look up a child by key or array index

        Returns:
            Child document, or MISSING when the key is absent
        """
        if not self.has(key):
            return MISSING
        return JSONDocument(self._value[key])

    def __getitem__(self, key: Union[str, int]) -> "JSONDocument":
        if not self.has(key):
            raise KeyError(key)
        return JSONDocument(self._value[key])

    def __bool__(self) -> bool:
        return True

    def __len__(self) -> int:
        if isinstance(self._value, (dict, list)):
            return len(self._value)
        return 0

    def __iter__(self) -> Iterator["JSONDocument"]:
        if isinstance(self._value, list):
            for item in self._value:
                yield JSONDocument(item)
        elif isinstance(self._value, dict):
            for item in self._value.values():
                yield JSONDocument(item)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JSONDocument):
            return not other.is_missing and self._value == other._value
        return NotImplemented

    def __repr__(self) -> str:
        return f"JSONDocument({self._value!r})"

    def as_int(self, default: int = 0) -> int:
        """Convert the value to an integer, returning default when not numeric"""
        value = self._value
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return default
        return default

    def as_text(self, default: str = "") -> str:
        """Convert the value to text; containers are serialised as JSON"""
        value = self._value
        if value is None:
            return default
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return json.dumps(value)

    def deep_copy(self) -> "JSONDocument":
        """Return an independently mutable copy of this document"""
        return JSONDocument(copy.deepcopy(self._value))

    def to_list(self) -> List[Any]:
        """Return a deep-copied list of the array elements, empty for non-arrays"""
        if not isinstance(self._value, list):
            return []
        return copy.deepcopy(self._value)

    def find_values_as_text(self, key: str) -> List[str]:
        """
        Collect every value stored under key anywhere in the tree

        Args:
            key: Field name to search for

        Returns:
            Values as text, depth-first in document order
        """
        found: List[str] = []
        self._collect(self._value, key, found)
        return found

    def to_json(self) -> str:
        return json.dumps(self._value, separators=(',', ':'))

    @staticmethod
    def _collect(value: Any, key: str, found: List[str]) -> None:
        if isinstance(value, dict):
            for name, child in value.items():
                if name == key:
                    found.append(JSONDocument(child).as_text())
                else:
                    JSONDocument._collect(child, key, found)
        elif isinstance(value, list):
            for child in value:
                JSONDocument._collect(child, key, found)


class _MissingDocument(JSONDocument):
    """Marker returned for lookups of absent keys"""

    def __init__(self):
        super().__init__(None)

    @property
    def is_missing(self) -> bool:
        return True

    def __bool__(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _MissingDocument)

    def __hash__(self) -> int:
        return hash(None)

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _MissingDocument()
