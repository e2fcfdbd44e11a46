"""
State stores for the keyring controller.

``ObservableStore`` holds a state dict and notifies subscribers on change.
``VaultStorage`` backends hold the single encrypted vault durably; writes are
all-or-nothing so a failed persist never leaves a partial vault behind.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union
import copy
import logging
import os
import tempfile
from pathlib import Path

from ..runtime.errors import VaultStorageError

logger = logging.getLogger(__name__)

StateListener = Callable[[Dict[str, Any]], None]


class ObservableStore:
    """
    Dict state container with change subscriptions.

    ``get_state`` returns a copy so callers cannot mutate the store.
    """

    def __init__(self, init_state: Optional[Dict[str, Any]] = None):
        self._state: Dict[str, Any] = dict(init_state or {})
        self._listeners: List[StateListener] = []

    def get_state(self) -> Dict[str, Any]:
        return copy.deepcopy(self._state)

    def put_state(self, new_state: Dict[str, Any]) -> None:
        """Replace the whole state."""
        self._state = dict(new_state)
        self._notify()

    def update_state(self, partial_state: Optional[Dict[str, Any]] = None, **kwargs) -> None:
        """Merge keys into the state."""
        self._state.update(partial_state or {}, **kwargs)
        self._notify()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with the new state after each change.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.get_state()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.warning(f"Store listener {listener!r} failed: {e}")

    def __repr__(self) -> str:
        return f"ObservableStore(keys={sorted(self._state)})"


class VaultStorage(ABC):
    """
    Durable storage for the encrypted vault blob.

    Exactly one vault exists per storage; ``write`` replaces it wholesale.
    """

    @abstractmethod
    def read(self) -> Optional[str]:
        """
        Read the stored vault.

        Returns:
            Vault ciphertext, or None if nothing has been stored
        """
        pass

    @abstractmethod
    def write(self, vault: str) -> None:
        """
        Atomically replace the stored vault.

        Raises:
            VaultStorageError: If the write fails; the previous vault is kept
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete the stored vault."""
        pass


class MemoryVaultStorage(VaultStorage):
    """
    In-memory vault storage.

    Stores the vault in memory with no persistence.
    """

    def __init__(self, vault: Optional[str] = None):
        self._vault = vault

    def read(self) -> Optional[str]:
        return self._vault

    def write(self, vault: str) -> None:
        if not isinstance(vault, str):
            raise VaultStorageError("Vault must be a string",
                                    details={"type": type(vault).__name__})
        self._vault = vault

    def clear(self) -> None:
        self._vault = None

    def __repr__(self) -> str:
        return f"MemoryVaultStorage(stored={self._vault is not None})"


class FileVaultStorage(VaultStorage):
    """
    File-based vault storage.

    Writes go to a temporary file in the same directory which is then
    renamed over the vault file, so readers see either the old or the new
    vault and never a truncated one.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file vault storage.

        Args:
            path: Vault file path; parent directories are created
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise VaultStorageError(f"Failed to read vault from {self.path}", cause=e)

    def write(self, vault: str) -> None:
        if not isinstance(vault, str):
            raise VaultStorageError("Vault must be a string",
                                    details={"type": type(vault).__name__})

        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".vault-", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(vault)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise VaultStorageError(f"Failed to write vault to {self.path}", cause=e)

        logger.debug(f"Wrote vault to {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def __repr__(self) -> str:
        return f"FileVaultStorage(path='{self.path}')"


__all__ = [
    "ObservableStore",
    "VaultStorage",
    "MemoryVaultStorage",
    "FileVaultStorage",
]
