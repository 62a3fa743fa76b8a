from __future__ import annotations

import pathlib
from typing import List, Optional, Union

from .config import MONTH_SUFFIX, TODO_ROOT_FOLDER, TODO_VAULT_DIR


class DocumentNotFoundError(FileNotFoundError):
    pass


class VaultStore:
    """Text blobs keyed by a slash-separated path under one root folder."""

    def __init__(self, root: Union[str, pathlib.Path, None] = None) -> None:
        self.root = pathlib.Path(root or TODO_VAULT_DIR).resolve()

    def _resolve(self, path: str) -> pathlib.Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"path escapes the vault: {path}")
        return target

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def read_text(self, path: str) -> str:
        target = self._resolve(path)
        if not target.is_file():
            raise DocumentNotFoundError(f"{path} not found in {self.root}")
        return target.read_text(encoding="utf-8")

    def write_text(self, path: str, content: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def resolve_monthly_todo_path(self, year: str, month: str) -> str:
        for candidate in monthly_todo_candidates(year, month):
            if self.exists(candidate):
                return candidate
        raise DocumentNotFoundError(
            f"Todo file for {year}/{month}{MONTH_SUFFIX}.md not found.")


def _month_tokens(month: str) -> List[str]:
    raw = str(month).strip()
    if raw.endswith(MONTH_SUFFIX):
        raw = raw[:-len(MONTH_SUFFIX)]
    tokens: List[str] = []
    numeric: Optional[int] = None
    try:
        numeric = int(raw)
    except ValueError:
        pass
    if numeric is not None:
        tokens.extend([f"{numeric:02d}", str(numeric)])
    elif raw:
        tokens.append(raw)
    return list(dict.fromkeys(tokens))


def monthly_todo_candidates(year: str, month: str) -> List[str]:
    """``Todo/<year>/<month>月.md`` in every spelling we accept, suffixed first."""
    folder = f"{TODO_ROOT_FOLDER}/{str(year).strip()}"
    tokens = _month_tokens(month)
    names = [f"{token}{MONTH_SUFFIX}.md" for token in tokens]
    names.extend(f"{token}.md" for token in tokens)
    return [f"{folder}/{name}" for name in names]
