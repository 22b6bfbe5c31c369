from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import TextIO

from .events import TelemetryEvent

ENABLE_ENV_VAR = "CUSTODIA_TELEMETRY_ENABLED"
_TRUTHY = {"1", "true", "yes", "on"}


def telemetry_enabled_from_env() -> bool:
    return os.getenv(ENABLE_ENV_VAR, "0").strip().lower() in _TRUTHY


def default_log_file(app_name: str) -> Path:
    return Path("artifacts") / "telemetry" / f"{app_name}.jsonl"


class TelemetryLogger:
    """Appends events as JSON lines; off unless enabled or the env var says so.

    Worker and poller threads may emit concurrently, so writes are serialized.
    """

    def __init__(
        self,
        *,
        app_name: str,
        enabled: bool | None = None,
        log_file: str | Path | None = None,
        echo_to: TextIO | None = None,
    ) -> None:
        self.app_name = app_name
        self.enabled = telemetry_enabled_from_env() if enabled is None else enabled
        self.log_file = Path(log_file) if log_file else default_log_file(app_name)
        self.echo_to = echo_to
        self._lock = threading.Lock()

    def emit(self, event: TelemetryEvent) -> bool:
        if not self.enabled:
            return False
        line = json.dumps({"app": self.app_name, **event.as_record()}, sort_keys=True, default=str)
        with self._lock:
            self._append(line)
            if self.echo_to is not None:
                self.echo_to.write(line + "\n")
                self.echo_to.flush()
        return True

    def _append(self, line: str) -> None:
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        with self.log_file.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
