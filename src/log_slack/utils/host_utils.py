from __future__ import annotations

import socket
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class HostIdentity:
    process_name: str
    machine_name: str


def current_process_name() -> str:
    program = sys.argv[0] if sys.argv and sys.argv[0] else ""
    name = Path(program).stem
    if name and name not in {"-c", "-m"}:
        return name
    return Path(sys.executable or "python").stem or "python"


def current_machine_name() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return ""


def current_host_identity() -> HostIdentity:
    return HostIdentity(
        process_name=current_process_name(),
        machine_name=current_machine_name(),
    )
