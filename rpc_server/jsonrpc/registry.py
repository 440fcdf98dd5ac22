"""Registry of bound handler objects."""
import importlib
import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from ..utils.errors import BindError, InvalidArgumentError

logger = logging.getLogger(__name__)

UNSET = object()


def type_key(cls: type) -> str:
    """Stable registry key for a handler class."""
    return f"{cls.__module__}.{cls.__qualname__}"


def public_methods(obj: Any) -> FrozenSet[str]:
    """Names of the public methods defined on the object's class."""
    names = set()
    for name in dir(type(obj)):
        if name.startswith("_"):
            continue
        attr = inspect.getattr_static(obj, name)
        if isinstance(attr, (staticmethod, classmethod)) or inspect.isfunction(attr):
            names.add(name)
        elif inspect.ismethoddescriptor(attr) and callable(attr):
            names.add(name)
    return frozenset(names)


@dataclass
class HandlerEntry:
    """A bound handler instance and the method table built when it was bound."""

    key: str
    instance: Any
    methods: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_instance(cls, instance: Any) -> "HandlerEntry":
        return cls(
            key=type_key(type(instance)),
            instance=instance,
            methods=public_methods(instance),
        )

    def exposes(self, method_name: str) -> bool:
        return method_name in self.methods


class HandlerRegistry:
    """Ordered mapping of type key to bound handler.

    At most one handler is kept per type key; binding a handler of a type
    that is already bound replaces the earlier entry in place.
    """

    def __init__(self):
        self._entries: Dict[str, HandlerEntry] = {}
        self._types: Dict[str, type] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def register_type(self, cls: type, name: Optional[str] = None) -> None:
        """Make a handler class resolvable by a short type name."""
        name = name or cls.__name__
        with self._lock:
            self._types[name] = cls
        logger.info(f"Registered handler type: {name}")

    def resolve_type(self, name: str) -> type:
        """Resolve a type name to a class.

        Short names registered with ``register_type`` are tried first, then
        import paths of the form ``package.module:Class`` or
        ``package.module.Class``.
        """
        with self._lock:
            cls = self._types.get(name)
        if cls is not None:
            return cls

        if ":" in name:
            module_name, _, attr_path = name.partition(":")
        else:
            module_name, _, attr_path = name.rpartition(".")
        if not module_name or not attr_path:
            raise BindError(f"Unknown handler type: {name}")

        try:
            target: Any = importlib.import_module(module_name)
            for part in attr_path.split("."):
                target = getattr(target, part)
        except (ImportError, AttributeError) as e:
            raise BindError(f"Unknown handler type: {name}") from e

        if not inspect.isclass(target):
            raise BindError(f"Not a class: {name}")
        return target

    def _instantiate(self, cls: type) -> Any:
        try:
            return cls()
        except Exception as e:
            raise BindError(f"Could not instantiate {cls.__name__}: {e}") from e

    def build_handler(self, descriptor: Any) -> Any:
        """Turn a descriptor into a handler instance.

        A descriptor is a handler instance, a class, a type name, or a
        mapping with a ``type`` key plus property values to assign.
        """
        if isinstance(descriptor, str):
            return self._instantiate(self.resolve_type(descriptor))

        if inspect.isclass(descriptor):
            return self._instantiate(descriptor)

        if isinstance(descriptor, Mapping):
            if "type" not in descriptor:
                raise BindError("Handler mapping has no 'type' key")
            type_ref = descriptor["type"]
            cls = type_ref if inspect.isclass(type_ref) else self.resolve_type(str(type_ref))
            instance = self._instantiate(cls)
            for prop, value in descriptor.items():
                if prop == "type":
                    continue
                try:
                    setattr(instance, prop, value)
                except Exception as e:
                    logger.debug(f"Skipped property {prop!r} on {cls.__name__}: {e}")
            return instance

        if type(descriptor).__module__ == "builtins":
            raise BindError(f"Not a handler object: {descriptor!r}")

        return descriptor

    def bind(self, descriptor: Any) -> bool:
        """Bind one handler under the type key of its class.

        Args:
            descriptor: A handler instance, a handler class, a type name
                (see ``resolve_type``), or a mapping with a ``type`` key and
                property values to assign after construction. Properties
                that cannot be assigned are skipped.

        Returns:
            True if the handler was bound, False if the descriptor could not
            be turned into a handler. A failed bind leaves the registry as
            it was.
        """
        try:
            instance = self.build_handler(descriptor)
        except BindError as e:
            logger.warning(f"Failed to bind handler: {e}")
            return False

        entry = HandlerEntry.from_instance(instance)
        with self._lock:
            self._entries[entry.key] = entry
        logger.info(f"Bound handler {entry.key} ({len(entry.methods)} methods)")
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries = {}

    def set_all(self, descriptors: Any = UNSET) -> Dict[str, Any]:
        """Replace, clear or read the bindings.

        Args:
            descriptors: Omitted to read the bindings; ``None`` to clear
                them; a list or tuple of descriptors to replace them.
                Descriptors that fail to bind are skipped.

        Returns:
            Copy of the bindings as type key -> handler instance.

        Raises:
            InvalidArgumentError: If ``descriptors`` is of any other type.
        """
        if descriptors is not UNSET:
            if isinstance(descriptors, (list, tuple)):
                with self._lock:
                    self.clear()
                    for descriptor in descriptors:
                        self.bind(descriptor)
            elif descriptors is None:
                self.clear()
            else:
                raise InvalidArgumentError("The parameter must be a list.")
        return self.snapshot()

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the bindings as type key -> handler instance."""
        with self._lock:
            return {key: entry.instance for key, entry in self._entries.items()}

    def list(self) -> List[HandlerEntry]:
        """Bound handlers in insertion order."""
        with self._lock:
            return list(self._entries.values())

    def find(self, method_name: str) -> Optional[HandlerEntry]:
        """First bound handler exposing the method, scanning in insertion order."""
        for entry in self.list():
            if entry.exposes(method_name):
                return entry
        return None
