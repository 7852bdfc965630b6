"""Synthetic data generators."""

from pet_registry.generators.pet import PetReport, PetReportGenerator, register_reports

__all__ = ["PetReport", "PetReportGenerator", "register_reports"]
