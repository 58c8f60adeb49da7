"""
Activation code generation.
Format: configured prefix + '-' + 6 random uppercase alphanumerics, e.g. APPLE-7K2Q9D.
"""

import secrets
import string
from typing import Optional

from classpoints.core.config import settings

CODE_RANDOM_LENGTH = 6


def generate_activation_code(prefix: Optional[str] = None) -> str:
    """
    Generate an activation code string.

    Uniqueness is enforced by the activation_codes.code constraint; callers
    retry on collision. Uses secrets for the random part.
    """
    if prefix is None:
        prefix = settings.activation_code_prefix
    prefix = (prefix or "").strip().upper()
    alphabet = string.ascii_uppercase + string.digits
    random_part = "".join(secrets.choice(alphabet) for _ in range(CODE_RANDOM_LENGTH))
    return f"{prefix}-{random_part}" if prefix else random_part
