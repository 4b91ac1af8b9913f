"""
treescript - generate Lua scripts that rebuild live instance trees.

Given a node of a host-managed instance tree, treescript produces a script
that, when run, constructs an equivalent tree:

- every node gets a unique, keyword-safe local name
- only properties that differ from the class defaults are written
- properties referencing other instances are assigned after all nodes
  exist, so forward references and cycles work; references outside the
  serialized subtree become paths such as workspace.Map.Spawn
- output that would not fit in one script (more than 200 locals or
  199,999 bytes) is split into one ModuleScript per node, linked
  with require()

Basic Usage:
    >>> from treescript import InMemoryHost, MetadataService, serialize
    >>> from treescript.catalog import BUILTIN_DUMP
    >>>
    >>> host = InMemoryHost(MetadataService(BUILTIN_DUMP))
    >>> model = host.create_instance("Model")
    >>> part = host.create_instance("Part")
    >>> part["Anchored"] = True
    >>> part.Parent = model
    >>> model["PrimaryPart"] = part
    >>> model.Parent = host.workspace
    >>>
    >>> container = serialize(model, host)
    >>> print(container.source)
    local Model = Instance.new("Model")

    local Part = Instance.new("Part")
    Part.Anchored = true
    Part.Parent = Model

    Model.PrimaryPart = Part

Options:
    >>> from treescript import Options
    >>> container = serialize(model, host, Options(verbose=False, module=True))

Failures:
    Fatal failures raise a SerializationError subclass (AccessRestricted,
    UnsupportedRoot, Uninstantiable, SizeExceeded). Skipped properties
    and descendants are reported as warnings on the "treescript" loggers.

To serialize several trees, keep one Serializer: it caches property lists
and default instances across runs.
"""

from treescript.api import ApiDump, ClassDescriptor, MetadataService, PropertyDescriptor
from treescript.assemble import OutputMode, SerializedNode, choose_mode
from treescript.containers import Container
from treescript.errors import (
    AccessRestricted,
    NameExhausted,
    SerializationError,
    SizeExceeded,
    Uninstantiable,
    UnsupportedRoot,
)
from treescript.literals import register_formatter, to_literal
from treescript.names import make_name_list
from treescript.options import COMPACT_OPTIONS, DEFAULT_OPTIONS, Options
from treescript.serialize import RunState, Serializer
from treescript.tree import Host, InMemoryHost, Instance


def serialize(root, host, options: Options = DEFAULT_OPTIONS, metadata: MetadataService | None = None) -> Container:
    """
    Serialize a node and its descendants with a one-off Serializer.

    Args:
        root: Root node of the subtree.
        host: Host object model the node belongs to.
        options: Run options.
        metadata: Class metadata service. Defaults to host.metadata.

    Returns:
        The output Container.

    Raises:
        SerializationError: On any fatal failure; no artifact is produced.
    """
    return Serializer(host, metadata, options, prewarm=False).serialize(root)


__all__ = [
    # Core API
    "serialize",
    "Serializer",
    "Options",
    "DEFAULT_OPTIONS",
    "COMPACT_OPTIONS",
    "Container",
    "RunState",
    "OutputMode",
    "SerializedNode",
    "choose_mode",
    "make_name_list",
    # Host model
    "Host",
    "InMemoryHost",
    "Instance",
    "MetadataService",
    "ApiDump",
    "ClassDescriptor",
    "PropertyDescriptor",
    # Formatting
    "to_literal",
    "register_formatter",
    # Errors
    "SerializationError",
    "AccessRestricted",
    "Uninstantiable",
    "UnsupportedRoot",
    "SizeExceeded",
    "NameExhausted",
]
