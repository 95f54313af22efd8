"""
Grading: keeps student grade maps and enrollment values in step, plus GPA
statistics over groups of students.
"""

import logging
import math
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..core.entities import Enrollment, Student
from ..core.enums import GradeType

logger = logging.getLogger(__name__)


GPA_RANGES = (
    (4.5, "Excellent (4.5-5.0)"),
    (3.5, "Very Good (3.5-4.4)"),
    (2.5, "Good (2.5-3.4)"),
    (2.0, "Satisfactory (2.0-2.4)"),
)
POOR_RANGE = "Poor (<2.0)"
NOT_GRADED_RANGE = "Not Graded"


class GradingService:
    """Service for grading enrollments and summarising GPAs."""

    def grade_student(self, student: Student, course_name: str, grade: GradeType) -> None:
        student.set_grade(course_name, grade)
        logger.info("Student %s received grade %s for course %s",
                    student.full_name, grade.name, course_name)

    def grade_enrollment(self, enrollment: Enrollment, grade: GradeType) -> Enrollment:
        """Record ``grade`` on the student's grade map, then on a new enrollment.

        The grade map is written first; if that raises, no new enrollment value
        exists and the two representations still agree.
        """
        enrollment.student.set_grade(enrollment.course.name, grade)
        graded = enrollment.with_grade(grade)
        logger.info("Enrollment graded: %s in %s - Grade: %s (%s)",
                    enrollment.student.full_name, enrollment.course.name,
                    grade.name, graded.status.name)
        return graded

    def grade_enrollments(self, enrollments: Iterable[Enrollment],
                          grades: Mapping[Tuple[int, str], GradeType]) -> List[Enrollment]:
        """Grade every enrollment whose ``key`` appears in ``grades``.

        Enrollments without an entry are returned unchanged, in input order.
        """
        result = []
        for enrollment in enrollments:
            grade = grades.get(enrollment.key)
            result.append(self.grade_enrollment(enrollment, grade) if grade is not None else enrollment)
        return result

    # GPA statistics; students with a GPA of 0.0 count as ungraded

    @staticmethod
    def graded_gpas(students: Iterable[Student]) -> List[float]:
        return [gpa for gpa in (s.calculate_gpa() for s in students) if gpa > 0.0]

    def average_gpa(self, students: Iterable[Student]) -> float:
        gpas = self.graded_gpas(students)
        return sum(gpas) / len(gpas) if gpas else 0.0

    def median_gpa(self, students: Iterable[Student]) -> float:
        gpas = sorted(self.graded_gpas(students))
        if not gpas:
            return 0.0
        middle = len(gpas) // 2
        if len(gpas) % 2 == 0:
            return (gpas[middle - 1] + gpas[middle]) / 2.0
        return gpas[middle]

    def gpa_standard_deviation(self, students: Iterable[Student]) -> float:
        gpas = self.graded_gpas(students)
        if not gpas:
            return 0.0
        mean = sum(gpas) / len(gpas)
        return math.sqrt(sum((gpa - mean) ** 2 for gpa in gpas) / len(gpas))

    @staticmethod
    def gpa_range(gpa: float) -> str:
        for lower_bound, label in GPA_RANGES:
            if gpa >= lower_bound:
                return label
        return POOR_RANGE if gpa > 0.0 else NOT_GRADED_RANGE

    def group_students_by_gpa_range(self, students: Iterable[Student]) -> Dict[str, List[Student]]:
        groups: Dict[str, List[Student]] = defaultdict(list)
        for student in students:
            groups[self.gpa_range(student.calculate_gpa())].append(student)
        return dict(groups)

    @staticmethod
    def find_honor_students(students: Iterable[Student], min_gpa: float) -> List[Student]:
        honors = [s for s in students if s.calculate_gpa() >= min_gpa]
        return sorted(honors, key=lambda s: s.calculate_gpa(), reverse=True)

    @staticmethod
    def find_at_risk_students(students: Iterable[Student], max_gpa: float) -> List[Student]:
        at_risk = [s for s in students if 0.0 < s.calculate_gpa() < max_gpa]
        return sorted(at_risk, key=lambda s: s.calculate_gpa())

    @staticmethod
    def find_top_student(students: Iterable[Student]) -> Optional[Student]:
        students = list(students)
        if not students:
            return None
        return max(students, key=lambda s: s.calculate_gpa())

    @staticmethod
    def grade_distribution(enrollments: Iterable[Enrollment]) -> Dict[GradeType, int]:
        return dict(Counter(e.grade for e in enrollments))

    @staticmethod
    def count_students_with_grade(students: Iterable[Student], course_name: str, grade: GradeType) -> int:
        return sum(1 for s in students if s.get_grade(course_name) == grade)
