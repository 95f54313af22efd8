"""
Assignment service: creating, submitting and scoring coursework.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from ..core.coursework import Assignment, Submission
from ..core.entities import Course, Student
from ..core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for assignments and their submissions."""

    def create_assignment(self, title: str, course: Course, max_points: int, due_date: datetime,
                          description: str = "") -> Assignment:
        assignment = Assignment(title, course, max_points, due_date, description)
        logger.info("Assignment created: %s for course %s", title, course.name)
        return assignment

    def submit(self, student: Student, assignment: Assignment, content: str = "") -> Submission:
        if not student.is_enrolled(assignment.course.name):
            raise NotFoundError(
                f"Student {student.full_name} is not enrolled in course {assignment.course.name}")
        submission = Submission(student, assignment, content)
        logger.info("Student %s submitted assignment %s", student.full_name, assignment.title)
        return submission

    def grade_submission(self, submission: Submission, score: int, feedback: str = "") -> None:
        submission.grade(score, feedback)
        logger.info("Submission graded: %s for %s - Score: %d/%d",
                    submission.student.full_name, submission.assignment.title,
                    score, submission.assignment.max_points)

    @staticmethod
    def find_overdue(assignments: Iterable[Assignment], now: Optional[datetime] = None) -> List[Assignment]:
        overdue = [a for a in assignments if a.is_overdue(now)]
        return sorted(overdue, key=lambda a: a.due_date)

    @staticmethod
    def average_percentage(assignment: Assignment, submissions: Iterable[Submission]) -> float:
        scores = [s.percentage for s in submissions if s.assignment == assignment and s.is_graded]
        return sum(scores) / len(scores) if scores else 0.0

    @staticmethod
    def top_submissions(assignment: Assignment, submissions: Iterable[Submission], limit: int) -> List[Submission]:
        graded = [s for s in submissions if s.assignment == assignment and s.is_graded]
        return sorted(graded, key=lambda s: s.percentage, reverse=True)[:limit]

    @staticmethod
    def pass_rate(submissions: Iterable[Submission], passing_score: int) -> float:
        graded = [s for s in submissions if s.is_graded]
        if not graded:
            return 0.0
        passed = sum(1 for s in graded if s.score >= passing_score)
        return passed * 100.0 / len(graded)
