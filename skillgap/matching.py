from __future__ import annotations

import logging
import threading

from rapidfuzz import fuzz, process

from skillgap.catalog import GENERAL_CATEGORY, SkillCatalog, normalize_skill_name
from skillgap.config import AnalysisSettings
from skillgap.models import MatchedSkill, MatchType

logger = logging.getLogger(__name__)

EXACT_CONFIDENCE = 1.0
SYNONYM_CONFIDENCE = 0.9


class SkillMatcher:
    """Resolve free-form skill names to canonical catalog skills.

    Lookup order is canonical name, synonym, then fuzzy similarity. Names the
    catalog does not know become their own canonical skill, so ``match`` only
    fails for blank input.
    """

    def __init__(self, catalog: SkillCatalog | None = None, settings: AnalysisSettings | None = None):
        self.catalog = catalog if catalog is not None else SkillCatalog.from_file()
        self.settings = settings or AnalysisSettings()
        self._aliases = self.catalog.aliases()
        self._alias_keys = list(self._aliases)
        self._cache: dict[str, MatchedSkill] = {}
        self._lock = threading.Lock()

    def match(self, raw_name: str) -> MatchedSkill:
        if not isinstance(raw_name, str):
            raise ValueError(f"Skill name must be a string, got {type(raw_name).__name__}")
        normalized = normalize_skill_name(raw_name)
        if not normalized:
            raise ValueError("Skill name must not be empty")

        with self._lock:
            cached = self._cache.get(normalized)
        if cached is not None:
            return cached

        matched = self._resolve(normalized)
        with self._lock:
            self._cache.setdefault(normalized, matched)
        return matched

    def same_skill(self, first: str, second: str) -> bool:
        return self.match(first).key == self.match(second).key

    def category_for(self, raw_name: str, fallback: str | None = None) -> str:
        matched = self.match(raw_name)
        if matched.match_type is not MatchType.NEW:
            return matched.category
        return fallback or GENERAL_CATEGORY

    def _resolve(self, normalized: str) -> MatchedSkill:
        entry = self.catalog.exact(normalized)
        if entry is not None:
            return MatchedSkill(entry.key, entry.name, entry.category, EXACT_CONFIDENCE, MatchType.EXACT)

        entry = self.catalog.synonym(normalized)
        if entry is not None:
            return MatchedSkill(entry.key, entry.name, entry.category, SYNONYM_CONFIDENCE, MatchType.SYNONYM)

        if self._alias_keys:
            best = process.extractOne(
                normalized,
                self._alias_keys,
                scorer=fuzz.ratio,
                score_cutoff=self.settings.fuzzy_threshold * 100.0,
            )
            if best is not None:
                alias, score, _ = best
                entry = self._aliases[alias]
                similarity = round(score / 100.0, 3)
                logger.debug("Fuzzy matched %r to %s (%.3f)", normalized, entry.name, similarity)
                return MatchedSkill(entry.key, entry.name, entry.category, similarity, MatchType.FUZZY)

        return MatchedSkill(
            normalized,
            normalized,
            GENERAL_CATEGORY,
            self.settings.unknown_skill_confidence,
            MatchType.NEW,
        )
