"""
atlas/qualification/errors.py — Error taxonomy for prospect qualification.

Every error here propagates to the caller. Nothing in the scoring core
substitutes a default score when one of these is raised.
"""


class QualificationError(Exception):
    """Base class for all qualification failures."""


class ValidationError(QualificationError):
    """A human assessment answer is empty or missing."""


class GenerationFailure(QualificationError):
    """The text-generation call failed or returned an incomplete structure."""


class MetricsUnavailable(QualificationError):
    """Public profile metrics could not be fetched for a handle."""


class ProspectNotFound(QualificationError):
    """No prospect exists with the requested id."""

    def __init__(self, prospect_id: int):
        super().__init__(f"Prospect {prospect_id} not found.")
        self.prospect_id = prospect_id
