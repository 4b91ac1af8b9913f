"""
Output artifacts.

A serialization run produces one Container tree. In flat mode it is a
single unit holding the whole script. In split mode the top unit holds the
glue that wires cross references, and each serialized node has its own
ModuleScript child, nested the same way the nodes are:

    SerializerOutput        (Script or ModuleScript)
    └── Model               (ModuleScript, returns the Model)
        ├── Part            (ModuleScript, returns the Part)
        └── Part1

Containers are Pydantic models, so an artifact can be exported with
model_dump_json() and loaded back with Container.model_validate_json().
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Literal

from pydantic import BaseModel, Field, PrivateAttr


class Container(BaseModel):
    """
    One executable unit of generated source.

    Attributes:
        class_name: "Script" for a standalone script, "ModuleScript" for a
            unit loaded with require().
        name: Unit name; for node units this is the node's identifier.
        source: Lua source of the unit.
        disabled: True for a Script that must not run on its own.
        children: Nested units.
    """

    class_name: Literal["Script", "ModuleScript"]
    name: str
    source: str = ""
    disabled: bool = False
    children: list[Container] = Field(default_factory=list)

    _parent: Container | None = PrivateAttr(default=None)

    def model_post_init(self, __context) -> None:
        for child in self.children:
            child._parent = self

    @property
    def parent(self) -> Container | None:
        return self._parent

    def add_child(self, child: Container) -> Container:
        if child._parent is not None:
            siblings = child._parent.children
            siblings[:] = [c for c in siblings if c is not child]
        child._parent = self
        self.children.append(child)
        return child

    def get_full_name(self) -> str:
        """Dotted names from the top unit down to this one."""
        names = []
        node = self
        while node is not None:
            names.append(node.name)
            node = node._parent
        return ".".join(reversed(names))

    def walk(self) -> Iterator[Container]:
        """Yield this unit and every nested unit, parents first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, path: str) -> Container | None:
        """Find a nested unit by dotted path relative to this one."""
        node = self
        for name in path.split("."):
            node = next((child for child in node.children if child.name == name), None)
            if node is None:
                return None
        return node

    @property
    def is_split(self) -> bool:
        return bool(self.children)

    def total_length(self) -> int:
        """Combined UTF-8 size of every unit's source."""
        return sum(len(unit.source.encode("utf-8")) for unit in self.walk())

    def write_to(self, directory: str | Path) -> Path:
        """
        Write this unit and its children as .lua files.

        Scripts are written as Name.server.lua, modules as Name.lua; the
        children of a unit go into a directory named after it.

        Returns:
            The path of the file written for this unit.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        suffix = ".server.lua" if self.class_name == "Script" else ".lua"
        path = directory / f"{self.name}{suffix}"
        path.write_text(self.source, encoding="utf-8")
        for child in self.children:
            child.write_to(directory / self.name)
        return path


Container.model_rebuild()
