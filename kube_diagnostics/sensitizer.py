"""
Masking of sensitive cluster data before it is sent to an AI backend

Values recorded by analyzers (object names, label values, ...) are replaced
with placeholders of the form ``[MASKED-<hex>]``. The placeholder is a keyed
hash of the value, so it is stable for the lifetime of a Sensitizer and cannot
be reversed by whoever receives the masked text.
"""

import hashlib
import hmac
import re
import secrets
from typing import Iterable, List, Optional, Tuple

from .models import Sensitive

PLACEHOLDER_PREFIX = "[MASKED-"
PLACEHOLDER_SUFFIX = "]"
PLACEHOLDER_DIGEST_LENGTH = 10


class Sensitizer:
    """Masks and restores sensitive substrings"""

    def __init__(self, salt: Optional[bytes] = None):
        """
        Initialize sensitizer

        Args:
            salt: Secret key for placeholder generation. A random one is
                generated when omitted, so placeholders differ between runs.
        """
        self._salt = salt if salt is not None else secrets.token_bytes(16)

    def placeholder(self, value: str) -> str:
        """Return the placeholder used for a sensitive value"""
        digest = hmac.new(self._salt, value.encode("utf-8"), hashlib.sha256).hexdigest()
        return f"{PLACEHOLDER_PREFIX}{digest[:PLACEHOLDER_DIGEST_LENGTH]}{PLACEHOLDER_SUFFIX}"

    def sanitize(self, text: str, sensitive_values: Iterable[str]) -> Tuple[str, List[Sensitive]]:
        """
        Replace every occurrence of the sensitive values in text

        Longer values win over values they contain, and replacement happens in
        a single pass so placeholders are never masked again.

        Args:
            text: Free text that may contain sensitive values
            sensitive_values: Values to mask

        Returns:
            Tuple of masked text and the substitutions actually performed
        """
        values = sorted({v for v in sensitive_values if v}, key=len, reverse=True)
        if not values or not text:
            return text, []

        substitutions: List[Sensitive] = []
        seen = set()

        def _mask(match: "re.Match") -> str:
            value = match.group(0)
            masked = self.placeholder(value)
            if value not in seen:
                seen.add(value)
                substitutions.append(Sensitive(unmasked=value, masked=masked))
            return masked

        pattern = re.compile("|".join(re.escape(v) for v in values))
        return pattern.sub(_mask, text), substitutions

    @staticmethod
    def restore(masked_text: str, substitutions: Iterable[Sensitive]) -> str:
        """
        Undo sanitize()

        Args:
            masked_text: Text containing placeholders
            substitutions: Substitutions returned by sanitize()

        Returns:
            Text with the original values put back
        """
        mapping = {s.masked: s.unmasked for s in substitutions if s.masked}
        if not mapping or not masked_text:
            return masked_text

        pattern = re.compile("|".join(re.escape(m) for m in sorted(mapping, key=len, reverse=True)))
        return pattern.sub(lambda match: mapping[match.group(0)], masked_text)
