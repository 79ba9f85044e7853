"""Shared helpers used by bundle tooling."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any


def compute_sha256(path: Path) -> str:
    """Return the SHA-256 checksum for a file."""

    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def read_json(path: Path) -> Any:
    """Load a UTF-8 JSON document, naming the file when it is malformed."""

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def template_digest(template_path: str) -> str:
    """Return the archive file stem for a template path.

    Hashes the path, not the content, so the consuming runtime can locate the
    parsed document from the template name alone.
    """

    return hashlib.md5(template_path.encode("utf-8")).hexdigest()


def to_jsonable(value: Any) -> Any:
    """Convert collaborator results into plain JSON-compatible data."""

    if hasattr(value, "to_payload"):
        return value.to_payload()
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value


def encode_json(payload: Any) -> bytes:
    """Encode a generated archive document with canonical formatting."""

    return json.dumps(to_jsonable(payload), indent=2, ensure_ascii=False).encode("utf-8")


def serialized_size(payload: Any) -> int:
    """Return the byte length of the compact JSON encoding of ``payload``."""

    compact = json.dumps(to_jsonable(payload), separators=(",", ":"), ensure_ascii=False)
    return len(compact.encode("utf-8"))
