# docqa/store.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path


@dataclass
class DocumentStore:
    """
    Hält genau einen Basistext im Speicher. Kein Locking: der letzte Schreiber gewinnt.
    Eine Instanz pro App (wird per create_app injiziert), nichts wird persistiert.
    """
    _content: str = ""

    def set_document(self, text: str) -> None:
        self._content = text

    def get_document(self) -> str:
        return self._content or ""

    def clear_document(self) -> None:
        self.set_document("")

    def has_document(self) -> bool:
        # reiner Whitespace zählt als "kein Dokument"
        return bool(self.get_document().strip())


def read_text_file(path: Path) -> str:
    """
    Liest Text aus Dateien. Unterstützt nur .txt und .md (PDF/DOC bewusst nicht).
    """
    suffix = path.suffix.lower()
    if suffix in {".txt", ".md"}:
        return path.read_text(encoding="utf-8", errors="ignore")
    raise ValueError(f"Unsupported file type: {suffix}")
