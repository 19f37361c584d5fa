"""Utilities for loading check definitions from YAML or JSON documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Sequence

import yaml

from ..models import CheckDefinition

logger = logging.getLogger(__name__)


class CheckLoadError(RuntimeError):
    """Raised when check files cannot be loaded or parsed."""


class CheckLoader:
    """Load ordered :class:`CheckDefinition` records from check files."""

    # ------------------------------------------------------------------
    def load(self, path: Path | str) -> List[CheckDefinition]:
        """Return the checks defined by ``path`` in file order."""

        path = Path(path)
        data = self._load_document(path)

        entries = data.get("checks")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise CheckLoadError(f"'checks' must be a list in check file {path}")

        checks = [self._build_check(entry, path, index) for index, entry in enumerate(entries)]
        logger.info("Loaded %d checks from %s", len(checks), path)
        return checks

    # ------------------------------------------------------------------
    def load_many(self, paths: Sequence[Path | str]) -> List[CheckDefinition]:
        """Concatenate the checks of several files, preserving order."""

        checks: List[CheckDefinition] = []
        for path in paths:
            checks.extend(self.load(path))
        return checks

    # ------------------------------------------------------------------
    def _load_document(self, path: Path) -> Mapping[str, Any]:
        if not path.exists():
            raise CheckLoadError(f"Check file not found: {path}")

        try:
            content = path.read_text(encoding="utf-8-sig")
        except OSError as exc:  # pragma: no cover - filesystem errors surfaced to caller
            raise CheckLoadError(f"Failed to read check file {path}") from exc

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as exc:
            raise CheckLoadError(f"Invalid YAML in check file {path}") from exc

        if not isinstance(data, Mapping):
            raise CheckLoadError(f"Check file must be a mapping: {path}")

        return data

    def _build_check(self, entry: Any, path: Path, index: int) -> CheckDefinition:
        if not isinstance(entry, Mapping):
            raise CheckLoadError(f"Check #{index + 1} in {path} must be a mapping")

        check_id = entry.get("id")
        title = entry.get("title")
        if check_id is None or title is None:
            raise CheckLoadError(f"Check #{index + 1} in {path} requires 'id' and 'title'")

        rules = entry.get("rules") or []
        if isinstance(rules, str):
            rules = [rules]
        if not isinstance(rules, list):
            raise CheckLoadError(f"'rules' of check {check_id} in {path} must be a list")

        return CheckDefinition(
            id=str(check_id),
            title=str(title),
            description=str(entry.get("description") or "").strip(),
            compliance=_flatten_compliance(entry.get("compliance")),
            remediation=_optional_text(entry.get("remediation")),
            rules=tuple(str(rule) for rule in rules),
        )


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _flatten_compliance(value: Any) -> str | None:
    """Render compliance references such as ``[{cis: [1.1, 1.2]}]`` as text."""

    if value is None:
        return None
    if isinstance(value, Mapping):
        value = [value]
    if not isinstance(value, list):
        return _optional_text(value)

    parts: List[str] = []
    for item in value:
        if isinstance(item, Mapping):
            for framework, refs in item.items():
                if isinstance(refs, list):
                    refs_text = ", ".join(str(ref) for ref in refs)
                else:
                    refs_text = str(refs)
                parts.append(f"{framework}: {refs_text}")
        elif item is not None:
            parts.append(str(item))

    return "; ".join(parts) or None


__all__ = ["CheckLoader", "CheckLoadError"]
