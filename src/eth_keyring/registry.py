"""
Keyring type registry.

Maps a keyring type name to the provider class that constructs it. The
controller resolves every ``add_new_keyring`` call and every vault restore
through a registry instance.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Type
import logging

from .keyrings.base import Keyring
from .keyrings.hd import HdKeyring
from .keyrings.simple import SimpleKeyring
from .runtime.errors import DuplicateTypeError, KeyringProviderError, UnknownKeyringTypeError

logger = logging.getLogger(__name__)


class KeyringRegistry:
    """
    Registry of keyring provider types.

    Registration is ordered; ``types()`` lists names in the order they were
    registered. Registering a name twice raises ``DuplicateTypeError`` unless
    ``override=True`` is passed.
    """

    DEFAULT_KEYRING_CLASSES: List[Type[Keyring]] = [
        SimpleKeyring,
        HdKeyring,
    ]

    def __init__(self, keyring_classes: Optional[Iterable[Type[Keyring]]] = None):
        """
        Initialize registry.

        Args:
            keyring_classes: Provider classes to register, in order
        """
        self._classes: Dict[str, Type[Keyring]] = {}
        for keyring_class in keyring_classes or ():
            self.register(keyring_class.type, keyring_class)

    @classmethod
    def default(cls, extra: Optional[Iterable[Type[Keyring]]] = None,
                override: bool = False) -> KeyringRegistry:
        """
        Registry with the bundled types followed by externally supplied ones.

        Args:
            extra: Additional provider classes
            override: Allow extra classes to replace already registered names
        """
        registry = cls(cls.DEFAULT_KEYRING_CLASSES)
        for keyring_class in extra or ():
            registry.register(keyring_class.type, keyring_class, override=override)
        return registry

    def register(self, type_name: str, keyring_class: Type[Keyring], override: bool = False) -> None:
        """
        Register a provider class.

        Raises:
            DuplicateTypeError: If type_name is taken and override is False
            KeyringProviderError: If type_name is empty
        """
        if not type_name:
            raise KeyringProviderError("Keyring type name must be a non-empty string",
                                       details={"class": getattr(keyring_class, "__name__", str(keyring_class))})
        if type_name in self._classes and not override:
            raise DuplicateTypeError(f"Keyring type already registered: {type_name}",
                                     details={"type": type_name})
        if type_name in self._classes:
            logger.info(f"Overriding keyring type '{type_name}'")
        self._classes[type_name] = keyring_class

    def resolve(self, type_name: str) -> Type[Keyring]:
        """
        Get the provider class for a type name.

        Raises:
            UnknownKeyringTypeError: If no provider is registered under type_name
        """
        keyring_class = self._classes.get(type_name)
        if keyring_class is None:
            raise UnknownKeyringTypeError(f"No keyring found for the requested type: {type_name}",
                                          details={"type": type_name})
        return keyring_class

    def types(self) -> List[str]:
        """Registered type names, in registration order."""
        return list(self._classes.keys())

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"KeyringRegistry(types={self.types()})"


__all__ = ["KeyringRegistry"]
