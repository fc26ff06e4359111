"""Typed variables persisted per domain.

A variable has a name and a default value. Its value can be stored globally
or per domain (usually a chat id). All variables of one domain share a single
JSON object in the storage, keyed by variable name; a missing key means the
default value applies.

Writes are read-modify-write over the whole domain object without locking,
so two writers interleaving on the same domain can lose an update.
"""

import json
import logging
from typing import Any, Generic, TypeVar

from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

Domain = int | str

VARIABLES_PREFIX = "VARIABLES_"


def type_tag(value: Any) -> str:
    """Classify a value as string, number, boolean, null, array or object.

    Args:
        value: Any JSON compatible value.

    Returns:
        One of 'string', 'number', 'boolean', 'null', 'array' or 'object'.
    """
    # bool is checked first since it is a subclass of int
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    if isinstance(value, list):
        return "array"
    return "object"


class BaseVariable(Generic[T]):
    """Shared persistence logic for all variable kinds.

    Attributes:
        name: Variable name, unique within a domain bucket.
        default_value: Value returned when nothing is stored.
        storage: Backend holding the domain buckets.
        type: Type tag inferred from the default value.
        description: Optional human readable description.
    """

    def __init__(
        self,
        name: str,
        default_value: T,
        storage: KeyValueStorage,
        description: str | None = None,
    ):
        self.name = name
        self.default_value = default_value
        self.storage = storage
        self.description = description
        self.type = type_tag(default_value)

    @staticmethod
    def item_name(domain: Domain | None = None) -> str:
        """Get the storage key of a domain bucket.

        Args:
            domain: Chat id or arbitrary string, None for the global bucket.

        Returns:
            Storage key such as 'VARIABLES_' or 'VARIABLES_1234'.
        """
        return VARIABLES_PREFIX + ("" if domain is None else str(domain))

    def _get_persistent(self, domain: Domain | None = None) -> dict[str, Any]:
        raw = self.storage.get_item(self.item_name(domain))
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Unreadable variable bucket {self.item_name(domain)}, using defaults")
            return {}

        return data if isinstance(data, dict) else {}

    def _set_persistent(self, data: dict[str, Any], domain: Domain | None = None) -> None:
        self.storage.set_item(self.item_name(domain), json.dumps(data))

    def _write(self, value: Any, domain: Domain | None = None) -> None:
        data = self._get_persistent(domain)
        data[self.name] = value
        self._set_persistent(data, domain)

    def get(self, domain: Domain | None = None) -> T:
        """Get the value of this variable in the global or a specific domain.

        Args:
            domain: Chat id or arbitrary string, None for the global bucket.

        Returns:
            Stored value, or the default value if nothing is stored.
        """
        data = self._get_persistent(domain)
        if self.name not in data:
            return self.default_value
        return data[self.name]

    def set(self, value: Any, domain: Domain | None = None) -> bool:
        """Set the value of this variable in the global or a specific domain.

        Args:
            value: New value, or its JSON string form.
            domain: Chat id or arbitrary string, None for the global bucket.

        Returns:
            True if the value was stored, False if it was rejected.
        """
        raise NotImplementedError

    def reset(self, domain: Domain | None = None) -> None:
        """Remove the stored value so that the default applies again.

        Args:
            domain: Chat id or arbitrary string, None for the global bucket.
        """
        data = self._get_persistent(domain)
        data.pop(self.name, None)
        self._set_persistent(data, domain)

    def __str__(self) -> str:
        return f"{self.name} = {json.dumps(self.get())}"


class Variable(BaseVariable[T]):
    """Variable that only accepts values of the same type as its default.

    Strings given to a non-string variable are parsed as JSON first, so
    ``set("456")`` works for a number variable while ``set("abc")`` is
    rejected without touching the stored value.
    """

    def set(self, value: Any, domain: Domain | None = None) -> bool:
        if self.type != "string" and isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                return False

        if type_tag(value) != self.type:
            return False

        self._write(value, domain)
        return True


class StringVariable(BaseVariable[str]):
    """Variable holding text. Any value is stored in its string form."""

    def __init__(
        self,
        name: str,
        default_value: str,
        storage: KeyValueStorage,
        description: str | None = None,
    ):
        super().__init__(name, default_value, storage, description)

    def set(self, value: Any, domain: Domain | None = None) -> bool:
        self._write(str(value), domain)
        return True


class BooleanVariable(BaseVariable[bool]):
    """Variable holding a flag."""

    def __init__(
        self,
        name: str,
        default_value: bool,
        storage: KeyValueStorage,
        description: str | None = None,
    ):
        super().__init__(name, default_value, storage, description)

    def set(self, value: Any, domain: Domain | None = None) -> bool:
        if isinstance(value, str):
            try:
                value = bool(json.loads(value))
            except json.JSONDecodeError:
                value = bool(value)

        self._write(bool(value), domain)
        return True

    def toggle(self, domain: Domain | None = None) -> bool:
        """Flip the flag.

        Args:
            domain: Chat id or arbitrary string, None for the global bucket.

        Returns:
            The new value.
        """
        value = not self.get(domain)
        self._write(value, domain)
        return value


class ObjectVariable(Variable[dict[str, Any]]):
    """Variable holding a JSON object, with per-property access."""

    def set_partial(self, value: dict[str, Any], domain: Domain | None = None) -> bool:
        """Merge properties into the stored object.

        Properties not present in ``value`` keep their current value. When
        nothing is stored yet, the merge starts from the default object.

        Args:
            value: Properties to overwrite.
            domain: Chat id or arbitrary string, None for the global bucket.

        Returns:
            True once the merged object is stored.
        """
        data = self._get_persistent(domain)
        current = data.get(self.name, self.default_value)
        merged = dict(current) if isinstance(current, dict) else {}
        merged.update(value)
        data[self.name] = merged
        self._set_persistent(data, domain)
        return True

    def get_property(self, key: str, domain: Domain | None = None) -> Any:
        return self.get(domain).get(key)

    def set_property(self, key: str, value: Any, domain: Domain | None = None) -> bool:
        return self.set_partial({key: value}, domain)

    def reset_property(self, key: str, domain: Domain | None = None) -> Any:
        """Set one property back to its value in the default object.

        Returns:
            The default value that was written.
        """
        value = self.default_value.get(key)
        self.set_property(key, value, domain)
        return value
