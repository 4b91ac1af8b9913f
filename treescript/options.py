"""
Serializer configuration.

The serializer recognizes four options:

- verbose: emit spaced, human-readable source and readable identifiers
  derived from instance names (otherwise compact source and short
  generated identifiers).
- parent: append a statement restoring the root's original parent.
- module: produce a loadable ModuleScript returning the root instead of a
  disabled Script.
- context: serialize with elevated (plugin) access, which changes the
  security levels filtered out of each class's property list.

    >>> from treescript.options import Options, COMPACT_OPTIONS
    >>> opts = COMPACT_OPTIONS.replace(module=True)
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass


# Hard ceiling on the UTF-8 size of any single generated script, in bytes.
MAX_SOURCE_LENGTH = 199_999

# Lua allows at most 200 locals per function; every node declares one.
LOCAL_VARIABLE_LIMIT = 200

OUTPUT_NAME = "SerializerOutput"


@dataclass(frozen=True)
class Options:
    """
    Options for a serialization run.

    Attributes:
        verbose: Human-readable output when True, size-optimized otherwise.
        parent: Restore the root's original Parent at the end of the script.
        module: Produce a ModuleScript that returns the root instance.
        context: Filter properties as seen from an elevated plugin context.
    """

    verbose: bool = True
    parent: bool = False
    module: bool = False
    context: bool = False

    def replace(self, **changes) -> 'Options':
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


DEFAULT_OPTIONS = Options()

COMPACT_OPTIONS = Options(verbose=False)
