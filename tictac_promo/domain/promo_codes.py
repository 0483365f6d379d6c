"""Candidate promo code generation.

Codes are opaque 5-digit strings drawn uniformly from 10000..99999. They are
not checked for uniqueness across players.
"""

import random
from typing import Optional

PROMO_CODE_MIN = 10000
PROMO_CODE_MAX = 99999
PROMO_CODE_MAX_LENGTH = 32


def generate_candidate_code(rng: Optional[random.Random] = None) -> str:
    return str((rng or random).randint(PROMO_CODE_MIN, PROMO_CODE_MAX))
