"""
Services module for enrollment, grading, catalog and coursework operations.
"""

from .enrollment_service import EnrollmentService
from .grading_service import GradingService
from .catalog_service import CatalogService
from .assignment_service import AssignmentService

__all__ = [
    "EnrollmentService",
    "GradingService",
    "CatalogService",
    "AssignmentService",
]
