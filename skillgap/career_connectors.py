from __future__ import annotations

import logging
import os
from typing import Any, Protocol
from urllib.parse import quote_plus

import requests

from skillgap.errors import ExtractorError, InvalidInputError
from skillgap.models import SkillRequirement
from skillgap.parsers import parse_requirement

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 12


class RequirementExtractor(Protocol):
    def extract(self, text: str, title: str) -> list[SkillRequirement]:
        ...


class HttpRequirementExtractor:
    """Client for the requirement-extraction service.

    The service turns a free-text job or project description into structured
    skill requirements. Transport and payload problems are logged and yield an
    empty list, which the analysis treats as "nothing required".
    """

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.url = url or os.getenv("SKILLGAP_EXTRACTOR_URL")
        self.api_key = api_key or os.getenv("SKILLGAP_EXTRACTOR_API_KEY")
        self.timeout = timeout
        self.session = session or requests.Session()

    def extract(self, text: str, title: str) -> list[SkillRequirement]:
        if not self.url:
            logger.warning("No requirement extractor URL configured; skipping extraction for %s", title)
            return []

        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            response = self.session.post(
                self.url,
                json={"title": title, "description": text},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            requirements = self._parse_payload(response.json())
        except (requests.RequestException, ValueError, ExtractorError) as exc:
            logger.warning("Requirement extraction for %s failed: %s", title, exc)
            return []

        logger.info("Extracted %d requirements for %s", len(requirements), title)
        return requirements

    def _parse_payload(self, payload: Any) -> list[SkillRequirement]:
        if isinstance(payload, dict):
            payload = payload.get("skillRequirements", payload.get("data"))
        if not isinstance(payload, list):
            raise ExtractorError("Extractor response has no requirement list", url=self.url)

        requirements = []
        for item in payload:
            try:
                requirements.append(parse_requirement(item))
            except InvalidInputError as exc:
                logger.warning("Dropping malformed extracted requirement %r: %s", item, exc.message)
        return requirements


def build_training_links(skills: list[str]) -> list[dict[str, str]]:
    top = skills[:3]
    if not top:
        return []
    query = quote_plus(" ".join(top))
    return [
        {
            "provider": "Coursera",
            "title": f"Courses for {', '.join(top)}",
            "url": f"https://www.coursera.org/search?query={query}",
        },
        {
            "provider": "edX",
            "title": "Professional certificates",
            "url": f"https://www.edx.org/search?q={query}",
        },
        {
            "provider": "Udemy",
            "title": "Hands-on project courses",
            "url": f"https://www.udemy.com/courses/search/?q={query}",
        },
        {
            "provider": "Pluralsight",
            "title": "Skill assessments and learning paths",
            "url": f"https://www.pluralsight.com/search?q={query}",
        },
    ]
