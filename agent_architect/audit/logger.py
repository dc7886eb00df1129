"""Audit logger: append-only JSON Lines with size-based rotation."""

from __future__ import annotations

import fcntl
import os
from pathlib import Path

from agent_architect.models import AuditEvent


class AuditLogger:
    """Writes one JSON object per line; safe across worker processes."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    @classmethod
    def from_env(cls, log_path: str) -> AuditLogger:
        max_bytes = int(os.environ.get("AUDIT_LOG_MAX_BYTES", "10485760"))
        backup_count = int(os.environ.get("AUDIT_LOG_BACKUP_COUNT", "5"))
        return cls(log_path=log_path, max_bytes=max_bytes, backup_count=backup_count)

    def _backup(self, index: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    def _rotate_if_needed(self) -> None:
        if not self.log_path.exists() or self.log_path.stat().st_size < self._max_bytes:
            return
        if self._backup_count <= 0:
            self.log_path.unlink()
            return
        self._backup(self._backup_count).unlink(missing_ok=True)
        for i in range(self._backup_count - 1, 0, -1):
            if self._backup(i).exists():
                self._backup(i).rename(self._backup(i + 1))
        self.log_path.rename(self._backup(1))

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        line = event.model_dump_json(exclude_none=True)

        lock_path = self.log_path.with_name(f".{self.log_path.name}.lock")
        with open(lock_path, "w") as lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_EX)
            try:
                self._rotate_if_needed()
                with open(self.log_path, "a") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lock_file, fcntl.LOCK_UN)
