"""Helpers to persist the parsed document for debugging."""
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any

from docx_engine.model.elements import Document


class DebugDumper:
    """Writes the document tree onto disk as JSON for inspection."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def dump(self, document: Document) -> Path:
        """Persist the document as JSON; binary payloads are reduced to their length."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.to_payload(document), indent=2), encoding="utf-8")
        return self.path

    def to_payload(self, document: Document) -> Any:
        return self._serialize(document)

    def _serialize(self, value: Any) -> Any:
        if is_dataclass(value) and not isinstance(value, type):
            payload = {"type": type(value).__name__}
            for field in fields(value):
                payload[field.name] = self._serialize(getattr(value, field.name))
            return payload
        if isinstance(value, (bytes, bytearray)):
            return {"bytes": len(value)}
        if isinstance(value, dict):
            return {str(k): self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value
