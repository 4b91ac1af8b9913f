"""
Serializer: converts a live instance tree into a reconstruction script.

This module contains the Serializer class, which drives one run through
these states:

    INIT -> NAMES_ALLOCATED -> ROOT_SERIALIZED -> DESCENDANTS_SERIALIZED
         -> STRATEGY_CHOSEN -> FLAT_ASSEMBLED | SPLIT_ASSEMBLED -> DONE

Any fatal failure moves the run to FAILED and raises; nothing is returned
for a failed run. The steps are:

1. Check the root is readable in the current access context.
2. Allocate identifiers for the root and every descendant.
3. Serialize the root. Failure here is fatal.
4. Serialize each readable descendant in traversal order. Unreadable or
   uninstantiable descendants are skipped with a warning. Access
   restriction is inherited down the tree, so skipping a locked node also
   skips everything beneath it.
5. Choose the flat or split layout and assemble the output.

Per node, only properties that differ from a freshly created instance of
the same class are emitted. Properties holding instances are deferred and
assigned after every node exists, which is what makes forward references
and reference cycles work.
"""

from __future__ import annotations

import enum
import logging

from treescript.api import MetadataService
from treescript.assemble import Assembler, OutputMode, SerializedNode, choose_mode
from treescript.containers import Container
from treescript.defaults import DefaultStateOracle
from treescript.errors import AccessRestricted, SerializationError, Uninstantiable, UnsupportedRoot
from treescript.literals import quote_string, to_literal
from treescript.names import NameTable, make_name_list
from treescript.options import DEFAULT_OPTIONS, Options
from treescript.reflection import ReflectionCache
from treescript.templates import templates_for

logger = logging.getLogger(__name__)


class RunState(enum.Enum):
    INIT = "init"
    NAMES_ALLOCATED = "names_allocated"
    ROOT_SERIALIZED = "root_serialized"
    DESCENDANTS_SERIALIZED = "descendants_serialized"
    STRATEGY_CHOSEN = "strategy_chosen"
    FLAT_ASSEMBLED = "flat_assembled"
    SPLIT_ASSEMBLED = "split_assembled"
    DONE = "done"
    FAILED = "failed"


class Serializer:
    """
    Long-lived serialization service.

    A Serializer owns the property cache and the default-state cache, so
    reusing one instance across runs avoids recomputing both. Runs on the
    same Serializer must not overlap.

    Attributes:
        host: Host object model the tree lives in.
        options: Options applied to every run.
        reflection: Cache of serializable property names per class.
        defaults: Cache of default instances per class.
        state: State of the current or last run.
        failure: Message of the last fatal failure, if any.
        mode: Output layout chosen by the last run.

    Example:
        >>> serializer = Serializer(host, options=Options(module=True))
        >>> container = serializer.serialize(model)
        >>> print(container.source)
    """

    def __init__(
        self,
        host,
        metadata: MetadataService | None = None,
        options: Options = DEFAULT_OPTIONS,
        reflection: ReflectionCache | None = None,
        prewarm: bool = True,
    ):
        """
        Initialize the serializer.

        Args:
            host: Host object model.
            metadata: Class metadata service. Defaults to host.metadata.
            options: Run options.
            reflection: Shared property cache. A new one is created from
                metadata when omitted.
            prewarm: Start filling the property cache for common classes
                on a background thread.
        """
        if reflection is None:
            reflection = ReflectionCache(metadata if metadata is not None else host.metadata)
        self.host = host
        self.options = options
        self.reflection = reflection
        self.defaults = DefaultStateOracle(host)
        self.state = RunState.INIT
        self.failure: str | None = None
        self.mode: OutputMode | None = None
        if prewarm:
            self.reflection.start_prewarm()

    # -------------------------------------------------------------------------
    # Single node
    # -------------------------------------------------------------------------

    def serialize_object(self, names: NameTable, node) -> SerializedNode:
        """
        Serialize one node into statements and deferred references.

        Args:
            names: Identifier table for the run.
            node: The node to serialize.

        Returns:
            A SerializedNode with the construction statement, the
            assignments for changed plain-value properties, and the
            changed instance-valued properties as deferred references.

        Raises:
            UnsupportedRoot: If the node is a service.
            Uninstantiable: If no default instance can be created.
        """
        class_name = self.host.class_of(node)
        if self.host.is_service(class_name):
            logger.warning("cannot serialize services")
            raise UnsupportedRoot(f"cannot serialize service {class_name}")

        default_state = self.defaults.default_state_of(class_name)
        verbose = self.options.verbose
        templates = templates_for(verbose)
        name = names[node]

        statements = [templates.instance % (name, quote_string(class_name))]
        refs = []
        for prop in sorted(self.reflection.get_properties(class_name, self.options.context)):
            if prop == "Parent":
                continue
            try:
                value = self.host.get_property(node, prop)
            except Exception:
                logger.warning("cannot serialize property '%s' of %s", prop, self._describe(node))
                continue
            default = self.host.get_property(default_state, prop)
            if value is default or value == default:
                continue
            if self.host.is_instance(value):
                refs.append((prop, value))
                continue
            try:
                literal = to_literal(value, verbose)
            except TypeError as e:
                logger.warning("cannot serialize property '%s' of %s: %s", prop, self._describe(node), e)
                continue
            statements.append(templates.property % (name, prop, literal))
        return SerializedNode(node=node, statements=statements, refs=refs)

    def _describe(self, node) -> str:
        try:
            return node.get_full_name()
        except Exception:
            return repr(node)

    def _can_index(self, node) -> bool:
        try:
            self.host.get_property(node, "Name")
        except Exception:
            return False
        return True

    # -------------------------------------------------------------------------
    # Whole tree
    # -------------------------------------------------------------------------

    def serialize(self, root) -> Container:
        """
        Serialize a node and its descendants.

        Args:
            root: Root of the subtree to serialize.

        Returns:
            The output Container: a single unit in flat mode, or a unit
            with one nested ModuleScript per node in split mode.

        Raises:
            AccessRestricted: If the root cannot be read.
            UnsupportedRoot: If the root is a service.
            Uninstantiable: If the root's class cannot be created.
            SizeExceeded: If any output unit would exceed the size limit.
            NameExhausted: If identifier allocation runs out of suffixes.
        """
        self.state = RunState.INIT
        self.failure = None
        self.mode = None
        try:
            return self._run(root)
        except SerializationError as e:
            self.state = RunState.FAILED
            self.failure = str(e)
            raise

    def try_serialize(self, root) -> tuple[bool, Container | None]:
        """Like serialize(), but return (False, None) instead of raising."""
        try:
            return True, self.serialize(root)
        except SerializationError:
            return False, None

    def _run(self, root) -> Container:
        if not self._can_index(root):
            logger.warning("cannot serialize object due to context restrictions")
            raise AccessRestricted("cannot serialize object due to context restrictions")

        templates = templates_for(self.options.verbose)
        descendants = self.host.get_descendants(root)
        names = make_name_list(root, descendants, self.host, self.options.verbose)
        self.state = RunState.NAMES_ALLOCATED

        top = self.serialize_object(names, root)
        self.state = RunState.ROOT_SERIALIZED

        serialized = {id(root)}
        records: list[SerializedNode] = []
        total_length = top.length
        for index, node in enumerate(descendants, start=1):
            if not self._can_index(node):
                logger.warning("cannot index descendant #%d due to context restrictions", index)
                continue
            parent = self.host.get_parent(node)
            if id(parent) not in serialized:
                logger.warning("skipping descendant #%d: its parent was not serialized", index)
                continue
            try:
                record = self.serialize_object(names, node)
            except (Uninstantiable, UnsupportedRoot):
                continue
            record.parent_statement = templates.property % (names[node], "Parent", names[parent])
            records.append(record)
            serialized.add(id(node))
            total_length += 1 + record.block_length
        self.state = RunState.DESCENDANTS_SERIALIZED

        self.mode = choose_mode(len(records), total_length)
        self.state = RunState.STRATEGY_CHOSEN
        logger.debug(
            "serialized %d descendants (%d bytes), using %s output",
            len(records), total_length, self.mode.value,
        )

        assembler = Assembler(self.host, names, root, self.options)
        container = assembler.assemble(self.mode, top, records)
        if self.mode is OutputMode.SPLIT:
            self.state = RunState.SPLIT_ASSEMBLED
        else:
            self.state = RunState.FLAT_ASSEMBLED
        self.state = RunState.DONE
        return container
