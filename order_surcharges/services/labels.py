"""
Snippet-based labels for surcharge line items.

Locale resolution: exact locale ("de-DE"), then any locale with the same
language ("de-AT" -> "de-DE"), then DEFAULT_LOCALE, then the snippet key
itself so a missing translation still renders something.
"""

import logging
from typing import Dict, Optional

from ..config import DEFAULT_LOCALE
from ..schemas.surcharges import SurchargeKind
from .interfaces import LabelProvider

logger = logging.getLogger(__name__)

SNIPPET_KEYS = {
    SurchargeKind.COD_FEE: "order.surcharges.cod-fee",
    SurchargeKind.LOGISTIC_SURCHARGE: "order.surcharges.logistic-surcharge",
}

SNIPPETS: Dict[str, Dict[str, str]] = {
    "en-GB": {
        "order.surcharges.cod-fee": "Cash on delivery fee",
        "order.surcharges.logistic-surcharge": "Logistic surcharge",
    },
    "de-DE": {
        "order.surcharges.cod-fee": "Nachnahmegebühr",
        "order.surcharges.logistic-surcharge": "Logistikpauschale",
    },
}


class SnippetLabelProvider(LabelProvider):
    """Looks labels up in an in-memory snippet table."""

    def __init__(
        self,
        snippets: Optional[Dict[str, Dict[str, str]]] = None,
        default_locale: str = DEFAULT_LOCALE,
    ):
        self._snippets = snippets if snippets is not None else SNIPPETS
        self._default_locale = default_locale

    def _resolve_locale(self, locale: Optional[str]) -> Optional[str]:
        if locale and locale in self._snippets:
            return locale
        if locale:
            language = locale.replace("_", "-").split("-")[0].lower()
            for candidate in self._snippets:
                if candidate.split("-")[0].lower() == language:
                    return candidate
        if self._default_locale in self._snippets:
            return self._default_locale
        return None

    def label(self, kind: SurchargeKind, locale: Optional[str]) -> str:
        key = SNIPPET_KEYS[kind]
        resolved = self._resolve_locale(locale)
        if resolved is None:
            logger.warning("No snippets for locale %s, using key %s", locale, key)
            return key
        return self._snippets[resolved].get(key, key)
