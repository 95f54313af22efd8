"""
Enumerations and constants for the registrar package.

Every enum is persisted by its canonical member name, so names must never be
renamed without a data migration.
"""

from enum import Enum
from functools import total_ordering

from .exceptions import ValidationError


class Role(Enum):
    """Account roles."""
    STUDENT = ("Student", "Enrolled in courses")
    PROFESSOR = ("Professor", "Teaching courses")
    ADMIN = ("Administrator", "System administrator")

    def __init__(self, display_name: str, description: str):
        self.display_name = display_name
        self.description = description

    def __str__(self) -> str:
        return self.display_name


class GradeType(Enum):
    """Letter grades with grade points and score bands."""
    A_PLUS = (5.0, "Excellent", 90, 100)
    A = (4.5, "Very Good", 80, 89)
    B = (3.5, "Good", 70, 79)
    C = (2.5, "Satisfactory", 60, 69)
    D = (1.5, "Sufficient", 50, 59)
    F = (0.0, "Fail", 0, 49)
    INCOMPLETE = (-1.0, "Incomplete", -1, -1)
    NOT_GRADED = (-1.0, "Not Yet Graded", -1, -1)

    def __init__(self, grade_point: float, description: str, min_score: int, max_score: int):
        self.grade_point = grade_point
        self.description = description
        self.min_score = min_score
        self.max_score = max_score

    @property
    def is_passing(self) -> bool:
        return 1.5 <= self.grade_point <= 5.0

    @property
    def is_sentinel(self) -> bool:
        """True for the two grades that carry no grade point."""
        return self in (GradeType.INCOMPLETE, GradeType.NOT_GRADED)

    @classmethod
    def from_score(cls, score: int) -> "GradeType":
        """Convert a numeric score (0-100) to a letter grade."""
        if score < 0 or score > 100:
            raise ValidationError(f"Score must be between 0 and 100, got {score}")
        for grade in cls:
            if grade.min_score != -1 and grade.min_score <= score <= grade.max_score:
                return grade
        return cls.NOT_GRADED

    def __str__(self) -> str:
        return f"{self.name.replace('_PLUS', '+')} ({self.description})"


class Semester(Enum):
    """The six terms of a three-year programme."""
    FIRST = (1, "First Semester")
    SECOND = (2, "Second Semester")
    THIRD = (3, "Third Semester")
    FOURTH = (4, "Fourth Semester")
    FIFTH = (5, "Fifth Semester")
    SIXTH = (6, "Sixth Semester")

    def __init__(self, number: int, display_name: str):
        self.number = number
        self.display_name = display_name

    @classmethod
    def from_number(cls, number: int) -> "Semester":
        for semester in cls:
            if semester.number == number:
                return semester
        raise ValidationError(f"Invalid semester number: {number}. Must be 1-6.")

    def __str__(self) -> str:
        return self.display_name


@total_ordering
class CourseLevel(Enum):
    """Course difficulty, ordered from BEGINNER to EXPERT."""
    BEGINNER = ("Beginner", 1)
    INTERMEDIATE = ("Intermediate", 2)
    ADVANCED = ("Advanced", 3)
    EXPERT = ("Expert", 4)

    def __init__(self, display_name: str, difficulty: int):
        self.display_name = display_name
        self.difficulty = difficulty

    def __lt__(self, other):
        if not isinstance(other, CourseLevel):
            return NotImplemented
        return self.difficulty < other.difficulty

    def __str__(self) -> str:
        return self.display_name


class LessonType(Enum):
    """Kinds of lessons within a course."""
    LECTURE = ("Lecture", "Traditional classroom lecture")
    LAB = ("Laboratory", "Hands-on practical session")
    SEMINAR = ("Seminar", "Discussion-based session")
    WORKSHOP = ("Workshop", "Interactive skill-building session")
    EXAM = ("Exam", "Assessment session")
    QUIZ = ("Quiz", "Short assessment")
    PROJECT_REVIEW = ("Project Review", "Project presentation and feedback")

    def __init__(self, display_name: str, description: str):
        self.display_name = display_name
        self.description = description

    def __str__(self) -> str:
        return self.display_name


class EnrollmentStatus(Enum):
    """Status of a student's enrollment in a course."""
    ACTIVE = ("Active", "Student is currently enrolled and attending")
    COMPLETED = ("Completed", "Student has successfully completed the course")
    DROPPED = ("Dropped", "Student has withdrawn from the course")
    FAILED = ("Failed", "Student did not pass the course")
    PENDING = ("Pending", "Enrollment is awaiting approval")

    def __init__(self, display_name: str, description: str):
        self.display_name = display_name
        self.description = description

    @property
    def is_active(self) -> bool:
        return self in (EnrollmentStatus.ACTIVE, EnrollmentStatus.PENDING)

    @property
    def is_terminal(self) -> bool:
        return self in (EnrollmentStatus.COMPLETED, EnrollmentStatus.FAILED)

    def __str__(self) -> str:
        return self.display_name
