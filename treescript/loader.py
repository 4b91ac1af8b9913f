"""
Tree descriptions: building instance trees from JSON.

A description lists top-level nodes and where to put them:

    {
      "parent": "Workspace",
      "roots": [
        {"class_name": "Model", "name": "Car", "id": "car",
         "properties": {"PrimaryPart": {"$ref": "body"}},
         "children": [
           {"class_name": "Part", "name": "Body", "id": "body",
            "properties": {"Size": {"Vector3": [4, 1, 8]},
                           "Material": {"Enum": "Material.Metal"}}}
         ]}
      ]
    }

Property values are plain JSON, tagged datatypes (see
datatypes.decode_value), references to another node by id ({"$ref": id})
or references by path from a service ({"$path": "Lighting.Sky"}).
References are assigned after every node exists, so they may point
forward or form cycles.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from treescript.datatypes import decode_value
from treescript.tree import InMemoryHost, Instance


class NodeSpec(BaseModel):
    """Description of one node and its subtree."""

    class_name: str
    name: str | None = None
    id: str | None = None
    locked: bool = False
    properties: dict[str, Any] = Field(default_factory=dict)
    children: list[NodeSpec] = Field(default_factory=list)


class TreeDocument(BaseModel):
    parent: str | None = "Workspace"
    roots: list[NodeSpec]


def load_document(path: str | Path) -> TreeDocument:
    return TreeDocument.model_validate_json(Path(path).read_text(encoding="utf-8"))


def resolve_path(host: InMemoryHost, path: str) -> Instance:
    """
    Find an instance by dotted path.

    The first segment is "game" or a service name; later segments are
    child names.

    Raises:
        ValueError: If a segment cannot be found.
    """
    first, *rest = path.split(".")
    node = host.game if first == "game" else host.get_service(first)
    for name in rest:
        child = node.find_first_child(name)
        if child is None:
            raise ValueError(f"{name!r} is not a valid member of {node.get_full_name() or 'game'}")
        node = child
    return node


def _is_reference(raw) -> bool:
    return isinstance(raw, dict) and len(raw) == 1 and ("$ref" in raw or "$path" in raw)


def build_tree(document: TreeDocument, host: InMemoryHost) -> list[Instance]:
    """
    Create the instances a document describes.

    Returns:
        The top-level instances, in document order.

    Raises:
        ValueError: On duplicate ids, unknown reference targets or classes
            the host cannot create.
    """
    ids: dict[str, Instance] = {}
    pending: list[tuple[Instance, str, dict]] = []
    locked: list[Instance] = []

    def build(spec: NodeSpec, parent: Instance | None) -> Instance:
        instance = host.create_instance(spec.class_name)
        if spec.name is not None:
            instance.Name = spec.name
        for prop, raw in spec.properties.items():
            if _is_reference(raw):
                pending.append((instance, prop, raw))
            else:
                instance[prop] = decode_value(raw)
        if spec.id is not None:
            if spec.id in ids:
                raise ValueError(f"duplicate node id {spec.id!r}")
            ids[spec.id] = instance
        instance.Parent = parent
        for child in spec.children:
            build(child, instance)
        if spec.locked:
            locked.append(instance)
        return instance

    parent = resolve_path(host, document.parent) if document.parent else None
    roots = [build(spec, parent) for spec in document.roots]

    for instance, prop, raw in pending:
        if "$ref" in raw:
            try:
                target = ids[raw["$ref"]]
            except KeyError:
                raise ValueError(f"unknown node id {raw['$ref']!r}") from None
        else:
            target = resolve_path(host, raw["$path"])
        instance[prop] = target

    for instance in locked:
        instance.locked = True
    return roots
