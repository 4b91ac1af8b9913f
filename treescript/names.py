"""
Identifier allocation for the nodes of a serialized tree.

Every node gets one Lua local name, computed once per run and shared by
every later stage. Two modes:

- verbose: names derived from the instance's Name ("Left Arm" becomes
  "LeftArm"), falling back to the class name, with 1, 2, 3... appended on
  collision;
- compact: short generated names (a, b, ..., Z, aa, ab, ...) in traversal
  order.

In both modes a name that is a Lua keyword, a global of the script
environment or a member of Instance gets a trailing underscore, and the
final identifiers are unique across the table.
"""

from __future__ import annotations

import string
from typing import Any, Iterable

from treescript.errors import NameExhausted


KEYWORDS = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "if", "in", "local", "nil", "not", "or", "repeat",
    "return", "then", "true", "until", "while",
})

# Globals bound in the environment the generated script runs in.
ENVIRONMENT_NAMES = frozenset({
    # Host globals
    "game", "Game", "workspace", "Workspace", "script", "plugin", "shared",
    "settings", "UserSettings", "Enum", "Instance",
    # Datatype constructors
    "Axes", "BrickColor", "CFrame", "Color3", "ColorSequence",
    "ColorSequenceKeypoint", "Faces", "NumberRange", "NumberSequence",
    "NumberSequenceKeypoint", "PhysicalProperties", "Ray", "Rect",
    "Region3", "TweenInfo", "UDim", "UDim2", "Vector2", "Vector3",
    # Lua standard library
    "_G", "_VERSION", "assert", "bit32", "collectgarbage", "coroutine",
    "debug", "error", "gcinfo", "getfenv", "getmetatable", "ipairs",
    "loadstring", "math", "newproxy", "next", "os", "pairs", "pcall",
    "print", "rawequal", "rawget", "rawset", "require", "select",
    "setfenv", "setmetatable", "string", "table", "tonumber", "tostring",
    "type", "typeof", "unpack", "utf8", "xpcall", "ypcall",
    # Scheduler functions
    "delay", "spawn", "tick", "time", "wait", "warn", "elapsedTime",
    "version", "stats",
})

# Members of Instance and ModuleScript. Split output reaches each node's
# module as script.Root.<identifier>, where these names index the member
# instead of the child.
INSTANCE_MEMBERS = frozenset({
    "Archivable", "ClassName", "Name", "Parent", "RobloxLocked", "UniqueId",
    "SourceAssetId", "Capabilities", "Sandboxed",
    "AncestryChanged", "AttributeChanged", "Changed", "ChildAdded",
    "ChildRemoved", "DescendantAdded", "DescendantRemoving", "Destroying",
    "AddTag", "ClearAllChildren", "Clone", "Destroy", "FindFirstAncestor",
    "FindFirstAncestorOfClass", "FindFirstAncestorWhichIsA",
    "FindFirstChild", "FindFirstChildOfClass", "FindFirstChildWhichIsA",
    "FindFirstDescendant", "GetActor", "GetAttribute",
    "GetAttributeChangedSignal", "GetAttributes", "GetChildren",
    "GetDebugId", "GetDescendants", "GetFullName",
    "GetPropertyChangedSignal", "GetTags", "HasTag", "IsA", "IsAncestorOf",
    "IsDescendantOf", "Remove", "RemoveTag", "SetAttribute", "WaitForChild",
    "children", "clone", "destroy", "findFirstChild", "getChildren", "isA",
    "isDescendantOf", "remove",
    # LuaSourceContainer and ModuleScript
    "Source", "LinkedSource", "ScriptGuid", "CurrentEditor",
})

MAX_NAME_SUFFIX = 1_000_000

_FIRST_CHARS = string.ascii_letters
# No underscore, so generated names never collide with reserved-name fixes
_REST_CHARS = string.ascii_letters + string.digits


def is_reserved(name: str) -> bool:
    return name in KEYWORDS or name in ENVIRONMENT_NAMES or name in INSTANCE_MEMBERS


def _is_word_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def is_identifier(name: str) -> bool:
    """True if name can be used bare in Lua (not a keyword, not digit-led)."""
    if not name or name in KEYWORDS:
        return False
    if name[0].isdigit():
        return False
    return all(_is_word_char(ch) for ch in name)


def sanitize_name(name: str) -> str:
    """
    Reduce an instance name to identifier characters.

    Keeps ASCII letters, digits and underscores, then strips any leading
    run of digits and underscores. May return an empty string.
    """
    kept = "".join(ch for ch in name if _is_word_char(ch))
    return kept.lstrip(string.digits + "_")


def make_lua_name(index: int) -> str:
    """
    Return the index-th short identifier, starting at 1.

    Names are enumerated shortest first: a..z, A..Z, then two characters
    with a letter followed by a letter or digit, and so on.
    """
    if index < 1:
        raise ValueError("index must be positive")
    n = index - 1
    length = 1
    block = len(_FIRST_CHARS)
    while n >= block:
        n -= block
        length += 1
        block = len(_FIRST_CHARS) * len(_REST_CHARS) ** (length - 1)
    head, rest = divmod(n, len(_REST_CHARS) ** (length - 1))
    tail = []
    for _ in range(length - 1):
        rest, digit = divmod(rest, len(_REST_CHARS))
        tail.append(_REST_CHARS[digit])
    return _FIRST_CHARS[head] + "".join(reversed(tail))


class NameTable:
    """
    Mapping from node to identifier, keyed by node identity.

    Holds a reference to every node so identities stay valid for the
    lifetime of the table.
    """

    def __init__(self):
        self._names: dict[int, str] = {}
        self._nodes: dict[int, Any] = {}

    def __setitem__(self, node, name: str) -> None:
        self._names[id(node)] = name
        self._nodes[id(node)] = node

    def __getitem__(self, node) -> str:
        return self._names[id(node)]

    def __contains__(self, node) -> bool:
        return id(node) in self._names

    def __len__(self) -> int:
        return len(self._names)

    def get(self, node, default=None):
        return self._names.get(id(node), default)

    def values(self):
        return self._names.values()


def _base_name(node, host) -> str:
    class_name = host.class_of(node)
    try:
        name = host.get_property(node, "Name")
    except Exception:
        # Locked nodes are skipped later; they still need a table entry.
        return class_name
    return sanitize_name(str(name)) or class_name


def _finalize(name: str) -> str:
    return name + "_" if is_reserved(name) else name


def make_name_list(root, descendants: Iterable, host, verbose: bool = True) -> NameTable:
    """
    Allocate an identifier for the root and every descendant.

    Args:
        root: The node being serialized.
        descendants: The root's descendants in traversal order.
        host: Host used to read names and class names.
        verbose: Derive names from instance names when True, generate
            short names otherwise.

    Returns:
        A NameTable covering every node, with unique values.

    Raises:
        NameExhausted: If no free suffix exists for a duplicated name.
    """
    objects = [root, *descendants]
    table = NameTable()
    if verbose:
        taken_bases: set[str] = set()
        assigned: set[str] = set()
        for node in objects:
            base = _base_name(node, host)
            candidate = base
            suffix = 0
            while candidate in taken_bases or _finalize(candidate) in assigned:
                suffix += 1
                if suffix > MAX_NAME_SUFFIX:
                    raise NameExhausted(f"no free identifier for {base!r}")
                candidate = f"{base}{suffix}"
            taken_bases.add(candidate)
            final = _finalize(candidate)
            assigned.add(final)
            table[node] = final
    else:
        for index, node in enumerate(objects, start=1):
            table[node] = _finalize(make_lua_name(index))
    return table
