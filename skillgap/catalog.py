from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from skillgap.config import DEFAULT_CATALOG_PATH

logger = logging.getLogger(__name__)

GENERAL_CATEGORY = "General"

_WHITESPACE = re.compile(r"\s+")


def normalize_skill_name(value: str) -> str:
    return _WHITESPACE.sub(" ", value.strip().lower())


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    category: str = GENERAL_CATEGORY
    synonyms: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return normalize_skill_name(self.name)


@dataclass
class SkillCatalog:
    """Canonical skills with their synonyms and category relationships.

    Aliases (canonical names and synonyms) are indexed by their normalized
    form. A synonym that collides with an earlier alias is ignored.
    """

    entries: list[CatalogEntry] = field(default_factory=list)
    related_categories: dict[str, dict[str, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._by_key: dict[str, CatalogEntry] = {}
        self._synonyms: dict[str, CatalogEntry] = {}
        for entry in self.entries:
            self._by_key[entry.key] = entry
        for entry in self.entries:
            for synonym in entry.synonyms:
                alias = normalize_skill_name(synonym)
                if not alias or alias in self._by_key or alias in self._synonyms:
                    logger.debug("Skipping duplicate alias %r for %s", synonym, entry.name)
                    continue
                self._synonyms[alias] = entry

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillCatalog:
        entries = [
            CatalogEntry(
                name=item["name"],
                category=item.get("category") or GENERAL_CATEGORY,
                synonyms=tuple(item.get("synonyms", [])),
            )
            for item in data.get("skills", [])
        ]
        related = {
            source: {target: float(weight) for target, weight in targets.items()}
            for source, targets in data.get("related_categories", {}).items()
        }
        return cls(entries=entries, related_categories=related)

    @classmethod
    def from_file(cls, path: str | Path = DEFAULT_CATALOG_PATH) -> SkillCatalog:
        with Path(path).open("r", encoding="utf-8") as f:
            catalog = cls.from_dict(json.load(f))
        logger.info("Loaded %d canonical skills from %s", len(catalog.entries), path)
        return catalog

    def exact(self, normalized: str) -> CatalogEntry | None:
        return self._by_key.get(normalized)

    def synonym(self, normalized: str) -> CatalogEntry | None:
        return self._synonyms.get(normalized)

    def aliases(self) -> dict[str, CatalogEntry]:
        return {**self._synonyms, **self._by_key}

    def relation_weight(self, from_category: str, to_category: str) -> float:
        return self.related_categories.get(from_category, {}).get(to_category, 0.0)

    def __len__(self) -> int:
        return len(self.entries)
