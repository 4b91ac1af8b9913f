"""
Output assembly: turning serialized nodes into script containers.

Two layouts are produced:

- Flat: one script that declares every node as a local, parents each
  descendant, then assigns every deferred instance reference once all
  locals exist.
- Split: used when the flat script would need more than
  LOCAL_VARIABLE_LIMIT locals or more than MAX_SOURCE_LENGTH bytes of
  UTF-8 source. Each node gets its own ModuleScript that constructs the
  node, requires its child modules and parents them to it, and returns
  the node. A top unit requires the root module and then resolves the
  deferred references through require() of the referenced node's module.

Deferred references resolve the same way in both layouts:

- a reference to the owning node itself uses the node's identifier;
- a reference into the serialized subtree uses the target's identifier
  (flat) or a require() of its module (split);
- anything else gets a full path from a recognized root, such as
  workspace.Map["Spawn Point"] or game:GetService("Lighting").Sky.

Every unit is measured after it is built; any unit over the limit aborts
the run with SizeExceeded and no artifact.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from treescript.containers import Container
from treescript.errors import SizeExceeded
from treescript.literals import quote_string
from treescript.names import INSTANCE_MEMBERS, NameTable, is_identifier
from treescript.options import LOCAL_VARIABLE_LIMIT, MAX_SOURCE_LENGTH, OUTPUT_NAME, Options
from treescript.templates import templates_for

logger = logging.getLogger(__name__)

SIZE_EXCEEDED_MESSAGE = "serialized string is too large or has too many descendants to write to output script"


class OutputMode(enum.Enum):
    FLAT = "flat"
    SPLIT = "split"


def choose_mode(descendant_count: int, total_length: int) -> OutputMode:
    """Pick the output layout from the serialized node count and length."""
    if descendant_count + 1 > LOCAL_VARIABLE_LIMIT or total_length > MAX_SOURCE_LENGTH:
        return OutputMode.SPLIT
    return OutputMode.FLAT


@dataclass
class SerializedNode:
    """
    Serialization result for one node.

    Attributes:
        node: The serialized node.
        statements: Construction statement followed by plain-value
            property assignments.
        refs: Deferred (property name, referenced node) pairs.
        parent_statement: "child.Parent = parent" for descendants.
    """

    node: Any
    statements: list[str]
    refs: list[tuple[str, Any]] = field(default_factory=list)
    parent_statement: str | None = None

    @property
    def length(self) -> int:
        """Exact byte length of the statements joined by newlines."""
        return sum(source_length(s) for s in self.statements) + len(self.statements) - 1

    @property
    def block_length(self) -> int:
        """Length of the block as it appears in a flat script."""
        if self.parent_statement is None:
            return self.length
        return self.length + 1 + source_length(self.parent_statement)


def source_length(text: str) -> int:
    """Length of source text in UTF-8 bytes, the unit the host limit counts."""
    return len(text.encode("utf-8"))


def _check_length(source: str) -> None:
    length = source_length(source)
    if length > MAX_SOURCE_LENGTH:
        logger.warning(SIZE_EXCEEDED_MESSAGE)
        raise SizeExceeded(SIZE_EXCEEDED_MESSAGE, length=length)


class Assembler:
    """
    Builds the output container for one run.

    Args:
        host: Host object model, used to walk ancestry of external nodes.
        names: Identifier table for the run.
        root: The serialized root node.
        options: Run options (density, parent restore, module output).
    """

    def __init__(self, host, names: NameTable, root, options: Options):
        self.host = host
        self.names = names
        self.root = root
        self.options = options
        self.templates = templates_for(options.verbose)
        self._serialized: set[int] = set()

    # -------------------------------------------------------------------------
    # Reference resolution
    # -------------------------------------------------------------------------

    def make_full_name(self, node) -> str:
        """
        Build a path expression for a node outside the serialized subtree.

        The walk stops at game, workspace, or the first service on the way
        up. Names that are not bare identifiers are indexed with quotes.
        Nodes that never reach one of those roots resolve to nil.
        """
        if node is None:
            return "nil"
        segments = []
        current = node
        while current is not None:
            if current is self.host.game:
                segments.append("game")
                break
            if current is self.host.workspace:
                segments.append("workspace")
                break
            class_name = self.host.class_of(current)
            if self.host.is_service(class_name):
                segments.append(self.templates.get_service % quote_string(class_name))
                break
            try:
                name = str(self.host.get_property(current, "Name"))
            except Exception:
                logger.warning("cannot build a path to %r due to context restrictions", node)
                return "nil"
            if is_identifier(name) and name not in INSTANCE_MEMBERS:
                segments.append("." + name)
            else:
                segments.append("[%s]" % quote_string(name))
            current = self.host.get_parent(current)
        else:
            logger.warning("cannot build a path to %r: it is not in the data model", node)
            return "nil"
        return "".join(reversed(segments))

    def _in_subtree(self, node) -> bool:
        return node is self.root or self.host.is_ancestor_of(self.root, node)

    def resolve(self, owner, target, containers: dict[int, Container] | None = None) -> str | None:
        """
        Return the expression a deferred reference should be assigned.

        Returns None when the target is inside the subtree but was not
        serialized, in which case the assignment is dropped.
        """
        if target is owner:
            return self.names[owner]
        if self._in_subtree(target):
            if id(target) not in self._serialized:
                logger.warning(
                    "cannot resolve reference %s of %s: the referenced instance was not serialized",
                    self.names.get(owner), self.names.get(target),
                )
                return None
            if containers is not None:
                return "require(script.%s)" % containers[id(target)].get_full_name()
            return self.names[target]
        return self.make_full_name(target)

    def _ref_statements(self, owner, refs, containers=None) -> list[str]:
        name = self.names[owner]
        statements = []
        for prop, target in refs:
            value = self.resolve(owner, target, containers)
            if value is not None:
                statements.append(self.templates.property % (name, prop, value))
        return statements

    def _parent_statement(self) -> str:
        parent = self.host.get_parent(self.root)
        return self.templates.property % (self.names[self.root], "Parent", self.make_full_name(parent))

    def _output_container(self, source: str) -> Container:
        if self.options.module:
            return Container(class_name="ModuleScript", name=OUTPUT_NAME, source=source)
        return Container(class_name="Script", name=OUTPUT_NAME, source=source, disabled=True)

    # -------------------------------------------------------------------------
    # Layouts
    # -------------------------------------------------------------------------

    def assemble(self, mode: OutputMode, top: SerializedNode, records: list[SerializedNode]) -> Container:
        self._serialized = {id(self.root)} | {id(record.node) for record in records}
        if mode is OutputMode.SPLIT:
            return self.assemble_split(top, records)
        return self.assemble_flat(top, records)

    def assemble_flat(self, top: SerializedNode, records: list[SerializedNode]) -> Container:
        """Lay everything out as one script."""
        verbose = self.options.verbose
        root_name = self.names[self.root]

        parts = ["\n".join(top.statements)]
        if verbose:
            parts.append("\n")
        for record in records:
            parts.append("\n")
            parts.append("\n".join(record.statements))
            parts.append("\n" + record.parent_statement)
            if verbose:
                parts.append("\n")
        parts.append("\n")

        for record in records:
            statements = self._ref_statements(record.node, record.refs)
            for statement in statements:
                parts.append(statement + "\n")
            if verbose and statements:
                parts.append("\n")
        for statement in self._ref_statements(self.root, top.refs):
            parts.append(statement + "\n")

        if self.options.parent:
            parts.append(self._parent_statement())
        if self.options.module:
            parts.append("\nreturn " + root_name)

        source = "".join(parts)
        _check_length(source)
        return self._output_container(source)

    def _node_container(self, name: str, statements: list[str]) -> Container:
        source = "\n".join(statements) + self.templates.require_children % name + "\nreturn " + name
        _check_length(source)
        return Container(class_name="ModuleScript", name=name, source=source)

    def assemble_split(self, top: SerializedNode, records: list[SerializedNode]) -> Container:
        """Lay out one module per node plus a top unit wiring references."""
        templates = self.templates
        root_name = self.names[self.root]

        root_container = self._node_container(root_name, top.statements)
        containers: dict[int, Container] = {id(self.root): root_container}
        for record in records:
            container = self._node_container(self.names[record.node], record.statements)
            parent = self.host.get_parent(record.node)
            containers[id(parent)].add_child(container)
            containers[id(record.node)] = container

        # Paths are taken before the root module joins the output unit, so
        # they are relative to the unit's `script`.
        statements = [templates.require_object % (root_name, "script." + root_container.get_full_name())]
        statements.extend(self._ref_statements(self.root, top.refs, containers))
        if self.options.parent:
            statements.append(self._parent_statement())

        for record in records:
            if not record.refs:
                continue
            name = self.names[record.node]
            container = containers[id(record.node)]
            statements.append(templates.require_object % (name, "script." + container.get_full_name()))
            statements.extend(self._ref_statements(record.node, record.refs, containers))

        if self.options.module:
            statements.append(templates.require_root % ("script." + root_name))

        source = "\n".join(statements)
        _check_length(source)
        output = self._output_container(source)
        output.add_child(root_container)
        return output
