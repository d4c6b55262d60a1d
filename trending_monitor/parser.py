"""HTML extraction for the GitHub trending page."""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .models import UPDATED_AT_UNKNOWN, ProjectRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://github.com"

_COUNT_NOISE = re.compile(r"[^\d.kK]")
_LEADING_INTEGER = re.compile(r"\d+")
_LEADING_DECIMAL = re.compile(r"\d*\.?\d+")


def parse_count(text: str | None) -> int:
    """Convert a display count such as ``"1,234"`` or ``"1.2k"`` to an integer.

    Anything unparseable yields ``0``.
    """

    if not text:
        return 0
    cleaned = _COUNT_NOISE.sub("", text)
    if "k" in cleaned.lower():
        match = _LEADING_DECIMAL.match(re.sub(r"[kK]", "", cleaned))
        if not match:
            return 0
        try:
            return max(int(Decimal(match.group()) * 1000), 0)
        except InvalidOperation:
            return 0
    match = _LEADING_INTEGER.match(cleaned)
    return int(match.group()) if match else 0


def extract_projects(html: str, base_url: str = DEFAULT_BASE_URL) -> list[ProjectRecord]:
    """Return one record per repository row, in page order.

    Rows without a heading link are skipped; ranks are assigned over the
    emitted records only.
    """

    soup = BeautifulSoup(html, "html.parser")
    projects: list[ProjectRecord] = []

    for row in soup.select(".Box-row"):
        link = row.select_one("h2 a")
        if link is None:
            continue
        href = (link.get("href") or "").strip()
        name = _normalize_name(link.get_text())
        if not href or not name:
            LOGGER.debug("Skipping trending row without a repository link")
            continue

        projects.append(
            ProjectRecord(
                name=name,
                url=urljoin(base_url, href),
                description=_text_of(row.select_one("p")),
                stars=parse_count(_text_of(_count_link(row, link, "/stargazers"))),
                forks=parse_count(_text_of(_count_link(row, link, "/forks"))),
                language=_text_of(row.select_one('[itemprop="programmingLanguage"]')),
                updated_at=_relative_time(row.select_one("relative-time")),
                rank=len(projects) + 1,
            )
        )

    if not projects:
        LOGGER.info("No trending repositories found in document")
    return projects


def _normalize_name(text: str) -> str:
    # The page renders "owner /\n  repo"; repository names never contain whitespace.
    return "".join(text.split())


def _count_link(row: Tag, heading: Tag, suffix: str) -> Tag | None:
    # The heading link can itself end in "/forks" when the repository is named that.
    for anchor in row.select(f'a[href$="{suffix}"]'):
        if anchor is not heading:
            return anchor
    return None


def _text_of(element: Tag | None) -> str:
    if element is None:
        return ""
    return element.get_text().strip()


def _relative_time(element: Tag | None) -> str:
    if element is None:
        return UPDATED_AT_UNKNOWN
    return element.get("datetime") or element.get_text().strip()


__all__ = ["extract_projects", "parse_count", "DEFAULT_BASE_URL"]
