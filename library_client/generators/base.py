"""Base generator class for sample-data generators."""

from __future__ import annotations

import random
from abc import ABC

from faker import Faker


class BaseGenerator(ABC):
    """Base class for all sample-data generators.

    Provides common initialization: Faker instance creation and
    seed-based reproducibility.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``tr_TR``).
    """

    def __init__(self, seed: int | None = None, locale: str = "tr_TR") -> None:
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)

    def new_id(self) -> str:
        """Object-id shaped identifier (24 hex characters)."""
        return self.fake.hexify(text="^" * 24)
