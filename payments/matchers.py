"""Order-code matchers for bank transfer descriptions.

Banks pass the customer's free-text transfer description through untouched,
so finding the order code is a heuristic. The matcher is selected with the
``PAYMENTS_ORDER_CODE_MATCHER`` setting (a dotted path) and can be swapped per
provider without touching the reconciliation logic.
"""

import re

from django.conf import settings
from django.utils.module_loading import import_string


class OrderCodeMatcher:
    """Interface: return candidate order codes found in ``text``, best first."""

    def match(self, text: str) -> list[str]:
        raise NotImplementedError


class RegexOrderCodeMatcher(OrderCodeMatcher):
    pattern = re.compile(r"[A-Z0-9]{3,20}")

    def match(self, text: str) -> list[str]:
        seen = []
        for token in self.pattern.findall((text or "").upper()):
            if token not in seen:
                seen.append(token)
        return seen


def get_matcher() -> OrderCodeMatcher:
    path = getattr(settings, "PAYMENTS_ORDER_CODE_MATCHER", "payments.matchers.RegexOrderCodeMatcher")
    return import_string(path)()
