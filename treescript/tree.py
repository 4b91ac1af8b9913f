"""
Host object model.

The serializer never touches instances directly; it goes through a Host,
which owns traversal, property access, instance creation and the
identification of the well-known roots. InMemoryHost is the reference
implementation used by the command line tool and the tests: it builds
instances from a MetadataService schema and enforces the same access
rules as the engine:

- reading a property whose security level is above the host's context
  raises PermissionError;
- reading anything on a locked instance, or on any descendant of a locked
  instance, raises PermissionError.

Parent links are a lookup maintained by the tree. Assigning Parent moves
the instance between the two parents' child lists.
"""

from __future__ import annotations

from typing import Any, Iterator, Protocol

from treescript.api import MetadataService


# Security levels readable from an ordinary script and from a plugin.
NORMAL_READABLE = frozenset({"None"})
PLUGIN_READABLE = frozenset({"None", "PluginSecurity"})


class Host(Protocol):
    """What the serializer needs from the host's object model."""

    metadata: MetadataService
    game: Any
    workspace: Any

    def create_instance(self, class_name: str) -> Any: ...

    def get_property(self, node: Any, name: str) -> Any: ...

    def get_parent(self, node: Any) -> Any: ...

    def get_descendants(self, node: Any) -> list: ...

    def is_instance(self, value: Any) -> bool: ...

    def is_ancestor_of(self, ancestor: Any, node: Any) -> bool: ...

    def class_of(self, node: Any) -> str: ...

    def is_service(self, class_name: str) -> bool: ...


class Instance:
    """
    A node of the instance tree.

    Identity is object identity: two instances with the same name and
    properties are still different nodes.

    Example:
        >>> part = Instance("Part", {"Anchored": True})
        >>> part.Parent = folder
        >>> part["Anchored"]
        True
    """

    def __init__(self, class_name: str, properties: dict | None = None, host: 'InMemoryHost | None' = None):
        self._class_name = class_name
        self._properties: dict[str, Any] = dict(properties or {})
        self._properties.setdefault("Name", class_name)
        self._parent: Instance | None = None
        self._children: list[Instance] = []
        self._host = host
        self.locked = False

    def __repr__(self) -> str:
        return f"<Instance {self._class_name} {self._properties['Name']!r}>"

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def ClassName(self) -> str:
        return self._class_name

    @property
    def Name(self) -> str:
        return self.get_property("Name")

    @Name.setter
    def Name(self, value: str) -> None:
        self.set_property("Name", value)

    @property
    def Parent(self) -> 'Instance | None':
        return self._parent

    @Parent.setter
    def Parent(self, value: 'Instance | None') -> None:
        self._set_parent(value)

    def __getitem__(self, name: str) -> Any:
        return self.get_property(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set_property(name, value)

    def is_locked(self) -> bool:
        node = self
        while node is not None:
            if node.locked:
                return True
            node = node._parent
        return False

    def get_property(self, name: str) -> Any:
        """
        Read a property.

        Raises:
            PermissionError: If the instance is locked or the property's
                security level is not readable from the host's context.
            AttributeError: If the class has no such property.
        """
        if self.is_locked():
            raise PermissionError(f"The current identity cannot access {name} of a locked instance")
        if self._host is not None:
            self._host.check_readable(self._class_name, name)
        if name == "ClassName":
            return self._class_name
        if name == "Parent":
            return self._parent
        try:
            return self._properties[name]
        except KeyError:
            raise AttributeError(f"{name} is not a valid member of {self._class_name}") from None

    def set_property(self, name: str, value: Any) -> None:
        if name == "Parent":
            self._set_parent(value)
            return
        if name == "ClassName":
            raise AttributeError("ClassName is read-only")
        if self._host is not None and name not in self._properties:
            raise AttributeError(f"{name} is not a valid member of {self._class_name}")
        self._properties[name] = value

    # -------------------------------------------------------------------------
    # Hierarchy
    # -------------------------------------------------------------------------

    def _set_parent(self, parent: 'Instance | None') -> None:
        if parent is self or (parent is not None and self.is_ancestor_of(parent)):
            raise ValueError(f"attempt to set parent of {self.Name} would create a cycle")
        if self._parent is not None:
            self._parent._children.remove(self)
        self._parent = parent
        if parent is not None:
            parent._children.append(self)

    def get_children(self) -> list['Instance']:
        return list(self._children)

    def iter_descendants(self) -> Iterator['Instance']:
        for child in self._children:
            yield child
            yield from child.iter_descendants()

    def get_descendants(self) -> list['Instance']:
        """All descendants in pre-order (each parent before its children)."""
        return list(self.iter_descendants())

    def is_ancestor_of(self, node: 'Instance') -> bool:
        node = node._parent
        while node is not None:
            if node is self:
                return True
            node = node._parent
        return False

    def find_first_child(self, name: str) -> 'Instance | None':
        for child in self._children:
            if child._properties["Name"] == name:
                return child
        return None

    def get_full_name(self) -> str:
        """Dotted path of names from the top ancestor, excluding the data model."""
        names = []
        node = self
        while node is not None:
            if node._class_name == "DataModel":
                break
            names.append(node._properties["Name"])
            node = node._parent
        return ".".join(reversed(names))


class InMemoryHost:
    """
    Host backed by plain Python objects and a MetadataService schema.

    Args:
        metadata: Class schema used for defaults, creatability and
            property security.
        elevated: Read properties as a plugin (PluginSecurity readable).

    Example:
        >>> from treescript.catalog import BUILTIN_DUMP
        >>> host = InMemoryHost(MetadataService(BUILTIN_DUMP))
        >>> part = host.create_instance("Part")
        >>> part.Parent = host.workspace
    """

    def __init__(self, metadata: MetadataService, elevated: bool = False):
        self.metadata = metadata
        self.elevated = elevated
        self.game = self._new("DataModel")
        self.game.Name = "Game"
        self._services: dict[str, Instance] = {}
        self.workspace = self.get_service("Workspace")

    def _new(self, class_name: str) -> Instance:
        properties = {
            prop.name: prop.default
            for prop in self.metadata.iter_properties(class_name)
            if prop.name not in ("Parent", "ClassName")
        }
        properties["Name"] = class_name
        return Instance(class_name, properties, host=self)

    def create_instance(self, class_name: str) -> Instance:
        """
        Create a parentless instance holding the class defaults.

        Raises:
            ValueError: If the class is unknown, abstract, or a service.
        """
        if not self.metadata.is_creatable(class_name):
            raise ValueError(f'Unable to create an Instance of type "{class_name}"')
        return self._new(class_name)

    def get_service(self, class_name: str) -> Instance:
        """Return the service singleton, creating it under game on first use."""
        service = self._services.get(class_name)
        if service is None:
            if not self.metadata.is_service(class_name):
                raise ValueError(f"{class_name!r} is not a valid Service name")
            service = self._new(class_name)
            service.Parent = self.game
            self._services[class_name] = service
        return service

    def check_readable(self, class_name: str, property_name: str) -> None:
        descriptor = self.metadata.get_property_descriptor(class_name, property_name)
        if descriptor is None:
            return
        readable = PLUGIN_READABLE if self.elevated else NORMAL_READABLE
        if descriptor.security not in readable:
            raise PermissionError(
                f"The current identity cannot read {class_name}.{property_name} "
                f"(lacking permission {descriptor.security})"
            )

    # -------------------------------------------------------------------------
    # Host protocol
    # -------------------------------------------------------------------------

    def get_property(self, node: Instance, name: str) -> Any:
        return node.get_property(name)

    def get_parent(self, node: Instance) -> Instance | None:
        return node.Parent

    def get_descendants(self, node: Instance) -> list[Instance]:
        return node.get_descendants()

    def is_instance(self, value: Any) -> bool:
        return isinstance(value, Instance)

    def is_ancestor_of(self, ancestor: Instance, node: Instance) -> bool:
        return ancestor.is_ancestor_of(node)

    def class_of(self, node: Instance) -> str:
        return node.ClassName

    def is_service(self, class_name: str) -> bool:
        return self.metadata.is_service(class_name)
