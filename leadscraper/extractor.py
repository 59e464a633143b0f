"""Email extraction from raw website HTML."""

from __future__ import annotations

import re
from urllib.parse import unquote

from bs4 import BeautifulSoup
from email_validator import EmailNotValidError, validate_email

_EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_MAILTO_PREFIX = "mailto:"
_INVISIBLE_TAGS = ("script", "style", "noscript", "template")


def is_valid_email(candidate: str | None) -> bool:
    """Return ``True`` when ``candidate`` is a syntactically valid address."""

    if not candidate:
        return False
    try:
        validate_email(candidate, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _mailto_candidates(soup: BeautifulSoup) -> list[str]:
    candidates: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href.lower().startswith(_MAILTO_PREFIX):
            continue
        address = href[len(_MAILTO_PREFIX) :].split("?", 1)[0]
        candidates.append(unquote(address).strip())
    return candidates


def _visible_text(soup: BeautifulSoup) -> str:
    for tag in soup(list(_INVISIBLE_TAGS)):
        tag.decompose()
    root = soup.body or soup
    return root.get_text(" ")


def extract_emails(html: str | None) -> set[str]:
    """Return the lower-cased, de-duplicated email addresses found in ``html``.

    Addresses come from ``mailto:`` anchors and from the visible page text.
    Candidates that fail validation are dropped silently.
    """

    if not html:
        return set()

    soup = BeautifulSoup(html, "html.parser")
    candidates = _mailto_candidates(soup)
    candidates.extend(_EMAIL_PATTERN.findall(_visible_text(soup)))

    found: set[str] = set()
    for candidate in candidates:
        if is_valid_email(candidate):
            found.add(candidate.lower())
    return found
