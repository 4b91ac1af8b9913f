"""
Serializable property lists, computed once per class and access context.

For each class the cache asks the metadata service for every property
that is neither read-only nor unscriptable and whose security level is
accessible in the requested context, then post-filters the list:

1. "XColor" is dropped when "XColor3" exists (prefer the Color3 form).
2. A lowercase-initial name is dropped when its CamelCase synonym exists.
3. Properties listed in FORBIDDEN_PROPERTIES for any superclass are
   dropped. These are derived fields that would fight with the canonical
   ones on reconstruction (Position/Orientation versus CFrame, for
   instance).

Results are memoized per (class, context) for the lifetime of the cache.
start_prewarm() fills the cache for PRELOAD_CLASSES on a background
thread once the metadata service is ready. That only moves latency off
the first serialization; a run that starts earlier computes what it needs
on demand.
"""

from __future__ import annotations

import logging
import threading

from treescript.api import MetadataService

logger = logging.getLogger(__name__)


PROPERTY_FILTER = ("ReadOnly", "NotScriptable")

NORMAL_SECURITY_FILTER = (
    "PluginSecurity",
    "LocalUserSecurity",
    "RobloxScriptSecurity",
    "NotAccessibleSecurity",
    "RobloxSecurity",
)

PLUGIN_SECURITY_FILTER = (
    "LocalUserSecurity",
    "RobloxScriptSecurity",
    "NotAccessibleSecurity",
    "RobloxSecurity",
)

FORBIDDEN_PROPERTIES: dict[str, tuple[str, ...]] = {
    "BasePart": ("Position", "Rotation", "Orientation", "BrickColor", "brickColor"),
    "FormFactorPart": ("FormFactor",),
    "GuiObject": ("Transparency",),
}

PRELOAD_CLASSES = (
    "Part",
    "Frame",
    "ScrollingFrame",
    "TextLabel",
    "TextButton",
    "TextBox",
    "ImageLabel",
    "ImageButton",
    "Humanoid",
)


def filter_properties(names: set[str], superclasses: list[str]) -> frozenset[str]:
    """Apply the alias and forbidden-property rules to a raw property set."""
    kept = set(names)
    for name in names:
        if name.endswith("Color") and name + "3" in names:
            kept.discard(name)
        elif name[:1].islower() and name[0].upper() + name[1:] in names:
            kept.discard(name)
    for superclass in superclasses:
        kept.difference_update(FORBIDDEN_PROPERTIES.get(superclass, ()))
    return frozenset(kept)


class ReflectionCache:
    """
    Per-(class, context) cache of serializable property names.

    The cache is append-only. Writes go through a lock because the
    pre-warm thread and a serialization run may miss on the same key at
    the same time.
    """

    def __init__(self, metadata: MetadataService):
        self.metadata = metadata
        self._cache: dict[tuple[str, bool], frozenset[str]] = {}
        self._lock = threading.Lock()
        self._prewarm_thread: threading.Thread | None = None

    def __contains__(self, key: tuple[str, bool]) -> bool:
        return key in self._cache

    def get_properties(self, class_name: str, context: bool = False) -> frozenset[str]:
        """
        Return the filtered property names for a class.

        Args:
            class_name: Class to look up.
            context: True for elevated (plugin) access.

        Raises:
            KeyError: If the metadata service does not know the class.
        """
        key = (class_name, bool(context))
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        raw = self.metadata.get_properties(
            class_name,
            PROPERTY_FILTER,
            PLUGIN_SECURITY_FILTER if context else NORMAL_SECURITY_FILTER,
        )
        properties = filter_properties(raw, self.metadata.get_superclasses(class_name))
        with self._lock:
            return self._cache.setdefault(key, properties)

    def prewarm(self, classes=PRELOAD_CLASSES) -> None:
        """Wait for the metadata service, then fill both contexts for each class."""
        self.metadata.ready.wait()
        for class_name in classes:
            try:
                self.get_properties(class_name, False)
                self.get_properties(class_name, True)
            except KeyError as e:
                logger.warning("cannot preload properties of %s: %s", class_name, e)
        logger.debug("preloaded properties for %d classes", len(classes))

    def start_prewarm(self, classes=PRELOAD_CLASSES) -> threading.Thread:
        """Run prewarm() on a daemon thread and return the thread."""
        if self._prewarm_thread is None:
            self._prewarm_thread = threading.Thread(
                target=self.prewarm,
                args=(tuple(classes),),
                name="treescript-prewarm",
                daemon=True,
            )
            self._prewarm_thread.start()
        return self._prewarm_thread
