"""Encrypted file-backed credential store."""

import asyncio
import json
import os
from dataclasses import dataclass
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from hotel_staff.services.session import CredentialStore, CredentialStoreError


@dataclass
class FernetCredentialStore(CredentialStore):
    """Credential store keeping a Fernet-encrypted JSON map on disk."""

    path: Path
    fernet: Fernet

    @classmethod
    def create(cls, path: str, key: str) -> "FernetCredentialStore":
        """Create a store for the given file path and urlsafe base64 key."""
        return cls(path=Path(path).expanduser(), fernet=Fernet(key.encode()))

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        items = await asyncio.to_thread(self._load)
        value = items.get(key)
        return value if isinstance(value, str) else None

    async def set_item(self, key: str, value: str) -> None:
        """Store a value under a key."""
        await asyncio.to_thread(self._update, key, value)

    async def delete_item(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        await asyncio.to_thread(self._update, key, None)

    def _load(self) -> dict[str, object]:
        try:
            encrypted = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise CredentialStoreError(f"Cannot read {self.path}") from exc
        try:
            decoded = json.loads(self.fernet.decrypt(encrypted))
        except InvalidToken as exc:
            raise CredentialStoreError("Credential file cannot be decrypted") from exc
        except ValueError as exc:
            raise CredentialStoreError("Credential file is corrupt") from exc
        if not isinstance(decoded, dict):
            raise CredentialStoreError("Credential file is corrupt")
        return decoded

    def _update(self, key: str, value: str | None) -> None:
        items = self._load()
        if value is None:
            if key not in items:
                return
            items.pop(key)
        else:
            items[key] = value
        payload = self.fernet.encrypt(json.dumps(items).encode("utf-8"))
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise CredentialStoreError(f"Cannot write {self.path}") from exc
