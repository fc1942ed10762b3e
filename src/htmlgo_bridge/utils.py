from __future__ import annotations

import hashlib
import os
import tempfile
import time
from pathlib import Path


def generate_attempt_id(prefix: str = "conv") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding=encoding) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def normalize_newlines(text: str) -> str:
    return "\n".join(line.rstrip() for line in text.splitlines()) + "\n"
