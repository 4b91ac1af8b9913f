"""
Class metadata service.

The metadata service answers questions about the host's class schema:
which properties a class exposes (with their tags and security levels),
its superclass chain, and whether it is a creatable class or a service
singleton. It is populated from an API dump, either the built-in one in
treescript.catalog or a JSON file with the same shape:

    {
      "classes": [
        {"name": "Instance", "superclass": null, "tags": ["NotCreatable"],
         "properties": [{"name": "Name", "value_type": "string"}, ...]},
        ...
      ]
    }

Consumers that run before the dump is loaded can wait on the `ready`
event.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Iterable, Iterator

from pydantic import BaseModel, Field, field_validator

from treescript.datatypes import decode_value


class PropertyDescriptor(BaseModel):
    """
    Schema entry for one property.

    Attributes:
        name: Property name, e.g. "Anchored".
        value_type: Name of the value type ("bool", "Vector3", "Instance"...).
        tags: Flags such as "ReadOnly", "NotScriptable", "Deprecated".
        security: Security level required to read the property.
        default: Value a freshly created instance holds.
    """

    name: str
    value_type: str = "string"
    tags: list[str] = Field(default_factory=list)
    security: str = "None"
    default: Any = None

    @field_validator("default", mode="before")
    @classmethod
    def _decode_default(cls, value):
        return decode_value(value)


class ClassDescriptor(BaseModel):
    """Schema entry for one class."""

    name: str
    superclass: str | None = None
    tags: list[str] = Field(default_factory=list)
    properties: list[PropertyDescriptor] = Field(default_factory=list)


class ApiDump(BaseModel):
    classes: list[ClassDescriptor]


class MetadataService:
    """
    Reflection over an API dump.

    Example:
        >>> from treescript.catalog import BUILTIN_DUMP
        >>> api = MetadataService(BUILTIN_DUMP)
        >>> api.get_superclasses("Part")
        ['FormFactorPart', 'BasePart', 'PVInstance', 'Instance']
    """

    def __init__(self, dump: ApiDump | None = None):
        self.ready = threading.Event()
        self._classes: dict[str, ClassDescriptor] = {}
        if dump is not None:
            self.load(dump)

    @classmethod
    def from_json(cls, path: str | Path) -> 'MetadataService':
        dump = ApiDump.model_validate_json(Path(path).read_text(encoding="utf-8"))
        return cls(dump)

    def load(self, dump: ApiDump) -> None:
        """Register every class in the dump and signal readiness."""
        for descriptor in dump.classes:
            self._classes[descriptor.name] = descriptor
        self.ready.set()

    def is_ready(self) -> bool:
        return self.ready.is_set()

    def get_class(self, class_name: str) -> ClassDescriptor:
        try:
            return self._classes[class_name]
        except KeyError:
            raise KeyError(f"unknown class {class_name!r}") from None

    def get_superclasses(self, class_name: str) -> list[str]:
        """Return the superclass chain, nearest first, excluding the class itself."""
        chain = []
        superclass = self.get_class(class_name).superclass
        while superclass is not None:
            chain.append(superclass)
            superclass = self.get_class(superclass).superclass
        return chain

    def iter_properties(self, class_name: str) -> Iterator[PropertyDescriptor]:
        """Yield the class's properties, own first, then inherited ones."""
        seen = set()
        for name in [class_name, *self.get_superclasses(class_name)]:
            for prop in self._classes[name].properties:
                if prop.name not in seen:
                    seen.add(prop.name)
                    yield prop

    def get_property_descriptor(self, class_name: str, property_name: str) -> PropertyDescriptor | None:
        for prop in self.iter_properties(class_name):
            if prop.name == property_name:
                return prop
        return None

    def get_properties(
        self,
        class_name: str,
        excluded_tags: Iterable[str] = (),
        excluded_security: Iterable[str] = (),
    ) -> set[str]:
        """
        Return the names of the class's properties, inherited ones included.

        Args:
            class_name: Class to inspect.
            excluded_tags: Drop properties carrying any of these tags.
            excluded_security: Drop properties requiring any of these
                security levels.

        Raises:
            KeyError: If the class is not in the dump.
        """
        excluded_tags = set(excluded_tags)
        excluded_security = set(excluded_security)
        return {
            prop.name
            for prop in self.iter_properties(class_name)
            if prop.security not in excluded_security and not excluded_tags.intersection(prop.tags)
        }

    def is_service(self, class_name: str) -> bool:
        return class_name in self._classes and "Service" in self._classes[class_name].tags

    def is_creatable(self, class_name: str) -> bool:
        descriptor = self._classes.get(class_name)
        if descriptor is None:
            return False
        return "NotCreatable" not in descriptor.tags and "Service" not in descriptor.tags
