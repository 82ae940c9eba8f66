"""Key storage for CLI commands.

Two backends are supported:

- ``memory``: keys live for the lifetime of the process (tests, dry runs).
- ``test``: keys are stored unencrypted as JSON files under
  ``<keyring-dir>/keyring-test``. Never use it for funds you care about.
"""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from nodekit.common.logging import get_logger
from nodekit.errors import KeyringError

logger = get_logger(__name__)

BACKEND_MEMORY = "memory"
BACKEND_TEST = "test"
KEYRING_BACKENDS = (BACKEND_MEMORY, BACKEND_TEST)


@dataclass(frozen=True)
class KeyRecord:
    """Public view of a stored key."""

    name: str
    address: str
    pubkey: str
    created_at: str


def _address(pubkey: bytes) -> str:
    return "0x" + hashlib.sha256(pubkey).digest()[:20].hex()


def _generate(name: str) -> tuple[KeyRecord, bytes]:
    private_key = Ed25519PrivateKey.generate()
    pubkey = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    secret = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    record = KeyRecord(
        name=name,
        address=_address(pubkey),
        pubkey=pubkey.hex(),
        created_at=datetime.now(UTC).isoformat(),
    )
    return record, secret


class Keyring:
    """Named key store backed by memory or by files on disk.

    Example:
        >>> kr = Keyring(BACKEND_MEMORY)
        >>> record = kr.add("validator")
        >>> kr.get("validator").address == record.address
        True
    """

    def __init__(self, backend: str, directory: Path | None = None) -> None:
        if backend not in KEYRING_BACKENDS:
            raise KeyringError(
                f"unsupported keyring backend {backend!r} (expected one of {', '.join(KEYRING_BACKENDS)})"
            )
        if backend == BACKEND_TEST and directory is None:
            raise KeyringError("the test keyring backend requires a keyring directory")

        self.backend = backend
        self.directory = directory / "keyring-test" if directory is not None else None
        self._memory: dict[str, tuple[KeyRecord, bytes]] = {}

    def add(self, name: str) -> KeyRecord:
        """Generate and store a new key under ``name``.

        Raises:
            KeyringError: If a key with that name already exists.
        """
        if not name or "/" in name:
            raise KeyringError(f"invalid key name: {name!r}")
        if self._exists(name):
            raise KeyringError(f"key {name!r} already exists")

        record, secret = _generate(name)
        if self.backend == BACKEND_MEMORY:
            self._memory[name] = (record, secret)
        else:
            self._write(record, secret)

        logger.info("Added key", extra={"key_name": name, "backend": self.backend})
        return record

    def get(self, name: str) -> KeyRecord:
        if self.backend == BACKEND_MEMORY:
            if name not in self._memory:
                raise KeyringError(f"key {name!r} not found")
            return self._memory[name][0]
        return self._read(name)

    def list(self) -> list[KeyRecord]:
        if self.backend == BACKEND_MEMORY:
            return [record for record, _ in sorted(self._memory.values(), key=lambda e: e[0].name)]
        directory = self._key_dir()
        if not directory.is_dir():
            return []
        return [self._read(path.stem) for path in sorted(directory.glob("*.json"))]

    def delete(self, name: str) -> None:
        if not self._exists(name):
            raise KeyringError(f"key {name!r} not found")
        if self.backend == BACKEND_MEMORY:
            del self._memory[name]
        else:
            self._path(name).unlink()
        logger.info("Deleted key", extra={"key_name": name, "backend": self.backend})

    def _exists(self, name: str) -> bool:
        if self.backend == BACKEND_MEMORY:
            return name in self._memory
        return self._path(name).is_file()

    def _key_dir(self) -> Path:
        if self.directory is None:
            raise KeyringError(f"the {self.backend} keyring backend has no key directory")
        return self.directory

    def _path(self, name: str) -> Path:
        return self._key_dir() / f"{name}.json"

    def _write(self, record: KeyRecord, secret: bytes) -> None:
        path = self._path(record.name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Owner-only from creation; never replaces an existing key file.
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "w") as fh:
                json.dump({**asdict(record), "secret": secret.hex()}, fh, indent=2)
        except FileExistsError as exc:
            raise KeyringError(f"key {record.name!r} already exists") from exc
        except OSError as exc:
            raise KeyringError(f"failed to write key {record.name!r}: {exc}") from exc

    def _read(self, name: str) -> KeyRecord:
        path = self._path(name)
        if not path.is_file():
            raise KeyringError(f"key {name!r} not found")
        try:
            data = json.loads(path.read_text())
            return KeyRecord(
                name=data["name"],
                address=data["address"],
                pubkey=data["pubkey"],
                created_at=data["created_at"],
            )
        except (OSError, ValueError, KeyError) as exc:
            raise KeyringError(f"corrupt key file {path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"Keyring(backend={self.backend!r}, directory={self.directory!s})"


__all__ = [
    "BACKEND_MEMORY",
    "BACKEND_TEST",
    "KEYRING_BACKENDS",
    "KeyRecord",
    "Keyring",
]
