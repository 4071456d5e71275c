# Purpose: Turn free-text tokens from a plan into the merchant's canonical tokens.

from typing import Mapping, Optional


def norm_str(s: Optional[str]) -> str:
    return (s or "").lower().strip()


def normalize(raw: Optional[str], mapping: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Lower-case and trim ``raw``, then apply the synonym ``mapping``.

    ``None`` and ``""`` come back unchanged. Unknown tokens are returned in
    their lower-cased, trimmed form.
    """
    if not raw:
        return raw
    key = norm_str(raw)
    if mapping and key in mapping:
        return mapping[key]
    return key
