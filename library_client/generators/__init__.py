"""Faker-backed sample-data generators."""

from library_client.generators.catalog import BookGenerator, UserGenerator
from library_client.generators.loans import LoanGenerator
from library_client.generators.scenario import LibraryScenario

__all__ = [
    "BookGenerator",
    "LibraryScenario",
    "LoanGenerator",
    "UserGenerator",
]
