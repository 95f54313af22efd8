"""
Enrollment service: creating enrollments and moving them through their
lifecycle.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..core.entities import Course, Enrollment, Student
from ..core.enums import EnrollmentStatus, Semester
from ..core.exceptions import DuplicateError, LimitExceededError, ValidationError

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for creating enrollments and querying enrollment lists."""

    def enroll_student(self, student: Student, course: Course, semester: Union[Semester, int],
                       pending: bool = False) -> Enrollment:
        """Enroll a student in a course.

        The student's own membership rules run first and raise
        ``DuplicateError`` or ``LimitExceededError`` before anything changes.
        The course roster is then updated, which is a no-op when the student
        is already listed there.
        """
        if isinstance(semester, int) and not isinstance(semester, bool):
            semester = Semester.from_number(semester)
        student.enroll_course(course.name)
        course.enroll_student(student)
        if pending:
            enrollment = Enrollment.pending(student, course, semester)
        else:
            enrollment = Enrollment(student, course, semester)
        logger.info("Student %s enrolled in course %s (%s, %s)",
                    student.full_name, course.name, semester.name, enrollment.status.name)
        return enrollment

    def enroll_many(self, student: Student, courses: Iterable[Course],
                    semester: Union[Semester, int]) -> List[Enrollment]:
        """Enroll in courses until the student's limit is hit.

        Stops at the first ``LimitExceededError``; duplicates are skipped.
        """
        enrollments = []
        for course in courses:
            try:
                enrollments.append(self.enroll_student(student, course, semester))
            except DuplicateError as e:
                logger.warning("Skipping duplicate enrollment: %s", e.message)
            except LimitExceededError as e:
                logger.warning("Student %s tried to enroll in too many courses: %s",
                               student.full_name, e.message)
                break
        return enrollments

    def activate(self, enrollment: Enrollment) -> Enrollment:
        """Approve a pending enrollment."""
        if enrollment.status != EnrollmentStatus.PENDING:
            raise ValidationError(f"Only pending enrollments can be activated, got {enrollment.status.name}")
        return enrollment.with_status(EnrollmentStatus.ACTIVE)

    def drop_enrollment(self, enrollment: Enrollment) -> Enrollment:
        """Withdraw from a course that has not finished yet."""
        if enrollment.status.is_terminal:
            raise ValidationError(f"Cannot drop a {enrollment.status.name.lower()} enrollment")
        dropped = enrollment.with_status(EnrollmentStatus.DROPPED)
        logger.info("Student %s dropped course %s", enrollment.student.full_name, enrollment.course.name)
        return dropped

    # Queries

    @staticmethod
    def filter_enrollments(enrollments: Iterable[Enrollment],
                           predicate: Callable[[Enrollment], bool]) -> List[Enrollment]:
        return [e for e in enrollments if predicate(e)]

    def by_student(self, enrollments: Iterable[Enrollment], student: Student) -> List[Enrollment]:
        return self.filter_enrollments(enrollments, lambda e: e.student == student)

    def by_course(self, enrollments: Iterable[Enrollment], course: Course) -> List[Enrollment]:
        return self.filter_enrollments(enrollments, lambda e: e.course == course)

    def by_semester(self, enrollments: Iterable[Enrollment], semester: Semester) -> List[Enrollment]:
        return self.filter_enrollments(enrollments, lambda e: e.semester == semester)

    def by_status(self, enrollments: Iterable[Enrollment], status: EnrollmentStatus) -> List[Enrollment]:
        return self.filter_enrollments(enrollments, lambda e: e.status == status)

    def active(self, enrollments: Iterable[Enrollment]) -> List[Enrollment]:
        return self.filter_enrollments(enrollments, lambda e: e.is_active)

    def passed(self, enrollments: Iterable[Enrollment]) -> List[Enrollment]:
        return self.filter_enrollments(enrollments, lambda e: e.is_passed)

    @staticmethod
    def group_by(enrollments: Iterable[Enrollment],
                 key: Callable[[Enrollment], Any]) -> Dict[Any, List[Enrollment]]:
        groups: Dict[Any, List[Enrollment]] = defaultdict(list)
        for enrollment in enrollments:
            groups[key(enrollment)].append(enrollment)
        return dict(groups)

    def group_by_semester(self, enrollments: Iterable[Enrollment]) -> Dict[Semester, List[Enrollment]]:
        return self.group_by(enrollments, lambda e: e.semester)

    def group_by_status(self, enrollments: Iterable[Enrollment]) -> Dict[EnrollmentStatus, List[Enrollment]]:
        return self.group_by(enrollments, lambda e: e.status)

    def group_by_course(self, enrollments: Iterable[Enrollment]) -> Dict[str, List[Enrollment]]:
        return self.group_by(enrollments, lambda e: e.course.name)

    @staticmethod
    def sort_by_grade(enrollments: Iterable[Enrollment]) -> List[Enrollment]:
        """Best grade point first."""
        return sorted(enrollments, key=lambda e: e.grade.grade_point, reverse=True)

    @staticmethod
    def sort_by_student_name(enrollments: Iterable[Enrollment]) -> List[Enrollment]:
        return sorted(enrollments, key=lambda e: e.student.first_name)

    @staticmethod
    def count_by_status(enrollments: Iterable[Enrollment], status: EnrollmentStatus) -> int:
        return sum(1 for e in enrollments if e.status == status)

    @staticmethod
    def completion_rate(enrollments: Iterable[Enrollment]) -> float:
        """Percentage of enrollments in COMPLETED status."""
        enrollments = list(enrollments)
        if not enrollments:
            return 0.0
        completed = sum(1 for e in enrollments if e.status == EnrollmentStatus.COMPLETED)
        return completed * 100.0 / len(enrollments)

    @staticmethod
    def find_top_enrollment(enrollments: Iterable[Enrollment]) -> Optional[Enrollment]:
        passed = [e for e in enrollments if e.is_passed]
        if not passed:
            return None
        return max(passed, key=lambda e: e.grade.grade_point)

    def get_statistics(self, enrollments: Iterable[Enrollment]) -> Dict[str, Any]:
        """Get enrollment statistics."""
        enrollments = list(enrollments)
        return {
            'total_enrollments': len(enrollments),
            'by_status': {status.name: self.count_by_status(enrollments, status)
                          for status in EnrollmentStatus},
            'completion_rate': self.completion_rate(enrollments),
        }
