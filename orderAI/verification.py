# Purpose: Read the storefront's order summary once, after every click/fill is done,
# and check that each resolved item, size and modifier shows up in it.

import re
from dataclasses import dataclass, field
from typing import Iterable, List

from orderAI.driver import Page
from orderAI.models import MerchantConfig, ResolvedItem
from orderAI.normalizer import norm_str

PASS_LINE = "[verify] RESULT: PASS"
FAIL_LINE = "[verify] RESULT: FAIL"
_PASS_RE = re.compile(r"\[verify\]\s+RESULT:\s+PASS")


@dataclass
class VerificationResult:
    ok: bool
    verified: bool
    mismatches: List[str] = field(default_factory=list)


def expected_tokens(item: ResolvedItem) -> Iterable[tuple]:
    """(kind, token) pairs the summary must mention for one resolved item.

    A substituted modifier is expected under its substitute's name.
    """
    yield "item", item.canonical
    if item.size:
        yield "size", item.size
    for m in item.modifiers:
        yield "modifier", item.applied.get(m) or m


def verify(page: Page, config: MerchantConfig, resolved_items: List[ResolvedItem], missing_count: int = 0) -> VerificationResult:
    summary_selector = config.verification.summary_selector
    if not summary_selector:
        return VerificationResult(ok=missing_count == 0, verified=False)

    text = norm_str(page.text_content(summary_selector))
    mismatches: List[str] = []
    for item in resolved_items:
        for kind, token in expected_tokens(item):
            if token and norm_str(token) not in text:
                mismatches.append(f"Missing {kind} '{token}' in summary")
    for required in config.verification.must_contain:
        if norm_str(required) and norm_str(required) not in text:
            mismatches.append(f"Missing required text '{required}' in summary")

    return VerificationResult(ok=not mismatches and missing_count == 0, verified=True, mismatches=mismatches)


# Callers that only see the runner's stdout derive the result from this line.
def is_pass(log_text: str) -> bool:
    return bool(_PASS_RE.search(log_text or ""))
