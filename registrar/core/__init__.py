"""
Core module containing the domain model of the records store.
"""

from .entities import Person, User, Professor, Student, Lesson, Course, Enrollment
from .coursework import Assignment, Submission
from .registry import Registry
from .exceptions import (
    RegistrarException, ValidationError, DuplicateError, LimitExceededError,
    NotFoundError, PersistenceError, DataLoadError, SnapshotError,
)
from .enums import Role, GradeType, Semester, CourseLevel, LessonType, EnrollmentStatus

__all__ = [
    # Entities
    "Person",
    "User",
    "Professor",
    "Student",
    "Lesson",
    "Course",
    "Enrollment",
    "Assignment",
    "Submission",
    "Registry",

    # Enums
    "Role",
    "GradeType",
    "Semester",
    "CourseLevel",
    "LessonType",
    "EnrollmentStatus",

    # Exceptions
    "RegistrarException",
    "ValidationError",
    "DuplicateError",
    "LimitExceededError",
    "NotFoundError",
    "PersistenceError",
    "DataLoadError",
    "SnapshotError",
]
