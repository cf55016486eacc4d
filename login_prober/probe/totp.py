"""Time-based one-time password generation."""

from typing import Callable, Union
from datetime import datetime

import pyotp

TotpGenerator = Callable[[str, Union[float, datetime]], str]


def generate_code(seed: str, for_time: Union[float, datetime]) -> str:
    """
    Generate the 6-digit TOTP code for a base32 seed at the given instant.

    Args:
        seed: Base32 encoded shared secret
        for_time: Unix timestamp or datetime inside the wanted 30s window

    Returns:
        str: Zero-padded 6-digit code

    Raises:
        ValueError: If the seed is not valid base32
    """
    try:
        return pyotp.TOTP(seed).at(for_time)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Failed to generate OTP: {e}") from e
