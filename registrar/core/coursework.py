"""
Assignments and student submissions.
"""

from datetime import datetime
from typing import Optional

from .entities import Course, Student
from .enums import GradeType
from .exceptions import ValidationError
from .validation import require_positive, require_text


class Assignment:
    """Graded piece of work belonging to exactly one course."""

    def __init__(self, title: str, course: Course, max_points: int, due_date: datetime,
                 description: str = ""):
        self._title = require_text(title, "Assignment title")
        if not isinstance(course, Course):
            raise ValidationError(f"Assignment {title} requires a course")
        if not isinstance(due_date, datetime):
            raise ValidationError(f"Assignment {title} requires a due date")
        self._course = course
        self._max_points = require_positive(max_points, "Max points")
        self._due_date = due_date
        self._description = description or ""
        self._created_date = datetime.now()

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> str:
        return self._description

    @property
    def course(self) -> Course:
        return self._course

    @property
    def max_points(self) -> int:
        return self._max_points

    @property
    def due_date(self) -> datetime:
        return self._due_date

    @property
    def created_date(self) -> datetime:
        return self._created_date

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now()) > self._due_date

    def __eq__(self, other) -> bool:
        if not isinstance(other, Assignment):
            return NotImplemented
        return self._title == other._title and self._course == other._course

    def __hash__(self) -> int:
        return hash((self._title, self._course))

    def __repr__(self) -> str:
        return f"Assignment(title={self._title!r}, course={self._course.name!r})"


class Submission:
    """A student's work for an assignment, optionally scored."""

    def __init__(self, student: Student, assignment: Assignment, content: str = "",
                 submitted_date: Optional[datetime] = None):
        if not isinstance(student, Student):
            raise ValidationError("Submission requires a student")
        if not isinstance(assignment, Assignment):
            raise ValidationError("Submission requires an assignment")
        self._student = student
        self._assignment = assignment
        self._content = content or ""
        self._submitted_date = submitted_date or datetime.now()
        self._score: Optional[int] = None
        self._feedback = ""

    @property
    def student(self) -> Student:
        return self._student

    @property
    def assignment(self) -> Assignment:
        return self._assignment

    @property
    def content(self) -> str:
        return self._content

    @property
    def submitted_date(self) -> datetime:
        return self._submitted_date

    @property
    def score(self) -> Optional[int]:
        return self._score

    @property
    def feedback(self) -> str:
        return self._feedback

    @property
    def is_graded(self) -> bool:
        return self._score is not None

    @property
    def is_late(self) -> bool:
        return self._submitted_date > self._assignment.due_date

    @property
    def percentage(self) -> Optional[float]:
        if self._score is None:
            return None
        return self._score * 100.0 / self._assignment.max_points

    @property
    def letter_grade(self) -> GradeType:
        if self._score is None:
            return GradeType.NOT_GRADED
        return GradeType.from_score(int(self.percentage))

    def grade(self, score: int, feedback: Optional[str] = None) -> None:
        if isinstance(score, bool) or not isinstance(score, int) \
                or score < 0 or score > self._assignment.max_points:
            raise ValidationError(f"Score must be between 0 and {self._assignment.max_points}")
        self._score = score
        self._feedback = feedback or ""

    def __eq__(self, other) -> bool:
        if not isinstance(other, Submission):
            return NotImplemented
        return self._student == other._student and self._assignment == other._assignment

    def __hash__(self) -> int:
        return hash((self._student, self._assignment))

    def __repr__(self) -> str:
        return (f"Submission(student={self._student.username!r}, "
                f"assignment={self._assignment.title!r}, score={self._score})")
