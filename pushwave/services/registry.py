"""Subscription registry backed by a single JSON file.

Every call re-reads the file, so the registry is always current as of the
last successful write. Inserts run read-modify-write under one lock; a second
process writing the same file is not guarded against.
"""
import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from pushwave.core.errors import RegistryStorageError
from pushwave.models import Subscription

log = logging.getLogger("pushwave.registry")

_SUBSCRIPTION_LIST = TypeAdapter(list[Subscription])


@dataclass(frozen=True)
class InsertResult:
    accepted: bool
    total_count: int


class SubscriptionRegistry:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def enumerate(self) -> list[Subscription]:
        """All subscriptions in insertion order; missing store means none."""
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise RegistryStorageError(f"Cannot read {self.path}: {e}") from e
        try:
            raw = json.loads(content)
        except ValueError as e:
            raise RegistryStorageError(f"Corrupt subscription store {self.path}: {e}") from e
        if not isinstance(raw, list):
            raise RegistryStorageError(f"Subscription store {self.path} is not a JSON array")
        try:
            return _SUBSCRIPTION_LIST.validate_python(raw)
        except ValidationError as e:
            raise RegistryStorageError(f"Malformed entry in {self.path}: {e}") from e

    def count(self) -> int:
        return len(self.enumerate())

    def insert(self, candidate: Subscription) -> InsertResult:
        """Append unless an entry with the same endpoint, p256dh and auth exists."""
        with self._lock:
            subscriptions = self.enumerate()
            identity = candidate.identity
            if any(item.identity == identity for item in subscriptions):
                return InsertResult(accepted=False, total_count=len(subscriptions))
            subscriptions.append(candidate)
            self._save(subscriptions)
        log.info("Subscription added: endpoint=%s total=%d", candidate.endpoint, len(subscriptions))
        return InsertResult(accepted=True, total_count=len(subscriptions))

    def _save(self, subscriptions: list[Subscription]) -> None:
        data = [s.model_dump(mode="json") for s in subscriptions]
        # Write to temp file then atomic replace
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise RegistryStorageError(f"Cannot write {self.path}: {e}") from e
