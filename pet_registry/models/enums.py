"""Enumeration types for pet records."""

from enum import Enum


class Species(str, Enum):
    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    RABBIT = "rabbit"
    OTHER = "other"


class PetStatus(str, Enum):
    MISSING = "missing"
    FOUND = "found"
    REUNITED = "reunited"


class QueryKind(str, Enum):
    SPATIAL = "spatial"
    ATTRIBUTE = "attribute"
