# -*- coding: utf-8 -*-
"""
Jurisdiction Normalization

Maps free-form country names entered by users ("Australia",
"united_states", "UK") onto the jurisdiction codes used by the emission
factor and compliance tables. Anything unrecognized maps to ``GLOBAL``.

Example:
    >>> from carbonprospect.footprint.jurisdictions import normalize_jurisdiction
    >>> normalize_jurisdiction("united_states")
    'US'
    >>> normalize_jurisdiction("Atlantis")
    'GLOBAL'
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from carbonprospect.footprint.models import GLOBAL_JURISDICTION

logger = logging.getLogger(__name__)

JURISDICTION_NAMES: Dict[str, str] = {
    "AU": "Australia",
    "US": "United States",
    "GB": "United Kingdom",
    "EU": "European Union",
    "CA": "Canada",
    "NZ": "New Zealand",
    "JP": "Japan",
    "KR": "South Korea",
    "SG": "Singapore",
    "CH": "Switzerland",
    "CN": "China",
    "IN": "India",
    "BR": "Brazil",
    GLOBAL_JURISDICTION: "Global",
}

_ALIASES: Dict[str, str] = {
    "australia": "AU", "au": "AU", "aus": "AU",
    "united states": "US", "united states of america": "US", "usa": "US", "us": "US",
    "united kingdom": "GB", "uk": "GB", "gb": "GB", "great britain": "GB", "england": "GB",
    "european union": "EU", "eu": "EU", "europe": "EU",
    "canada": "CA", "ca": "CA", "can": "CA",
    "new zealand": "NZ", "nz": "NZ", "newzealand": "NZ",
    "japan": "JP", "jp": "JP", "jpn": "JP",
    "south korea": "KR", "korea": "KR", "kr": "KR", "kor": "KR",
    "singapore": "SG", "sg": "SG", "sgp": "SG",
    "switzerland": "CH", "ch": "CH", "che": "CH",
    "china": "CN", "cn": "CN", "chn": "CN",
    "india": "IN", "in": "IN", "ind": "IN",
    "brazil": "BR", "br": "BR", "bra": "BR",
    "global": GLOBAL_JURISDICTION, "world": GLOBAL_JURISDICTION,
}


def normalize_jurisdiction(name: Optional[str]) -> str:
    """Resolve a free-form country name to a jurisdiction code.

    Matching is case-insensitive; underscores, hyphens and repeated
    whitespace are treated as single spaces.

    Args:
        name: Country name, alias or code. ``None`` and blanks are allowed.

    Returns:
        Jurisdiction code, or ``GLOBAL`` when the name is not recognized.
    """
    if not name:
        return GLOBAL_JURISDICTION
    key = re.sub(r"[\s_\-]+", " ", name.strip().lower())
    code = _ALIASES.get(key)
    if code is None:
        logger.debug("Unrecognized jurisdiction %r, using %s", name, GLOBAL_JURISDICTION)
        return GLOBAL_JURISDICTION
    return code


def jurisdiction_name(code: str) -> str:
    """Display name for a jurisdiction code (the code itself if unknown)."""
    return JURISDICTION_NAMES.get(code, code)


__all__ = ["JURISDICTION_NAMES", "normalize_jurisdiction", "jurisdiction_name"]
