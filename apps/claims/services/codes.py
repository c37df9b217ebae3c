"""Random identifiers handed out by the redemption engine."""

import secrets

from django.conf import settings
from django.utils import timezone

# No 0/O, 1/I/L: codes are read aloud and typed at the till
CLAIM_CODE_ALPHABET = '23456789ABCDEFGHJKMNPQRSTUVWXYZ'
RECEIPT_SUFFIX_ALPHABET = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'


def generate_claim_code(length: int = None) -> str:
    """Return a random claim code of CLAIM_CODE_LENGTH characters."""
    length = length or settings.CLAIM_CODE_LENGTH
    return ''.join(secrets.choice(CLAIM_CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    return (code or '').strip().upper()


def mask_code(code: str) -> str:
    """Keep only the last three characters for logging."""
    return f"***{code[-3:]}" if code else ''


def generate_receipt_number() -> str:
    """Return a receipt number like POS20260119143005K3Z9QA."""
    stamp = timezone.now().strftime('%Y%m%d%H%M%S')
    suffix = ''.join(secrets.choice(RECEIPT_SUFFIX_ALPHABET) for _ in range(6))
    return f"POS{stamp}{suffix}"


def generate_session_token() -> str:
    return f"pos_{secrets.token_urlsafe(24)}"
