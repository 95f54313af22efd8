"""
Catalog service: building courses and searching people and courses.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..core.entities import Course, Lesson, Professor, Student
from ..core.enums import CourseLevel
from ..core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for course creation, search and course-level aggregates."""

    def create_course(self, name: str, professor: Professor, ects: int,
                      level: CourseLevel = CourseLevel.BEGINNER,
                      lessons: Iterable[Lesson] = (),
                      max_lessons: int = Course.DEFAULT_MAX_LESSONS) -> Course:
        """Build a course with its lessons and assign it to ``professor``.

        The course and its lessons are fully built before the professor is
        touched, so a rejected lesson leaves the professor unchanged.
        """
        course = Course(name, professor, ects, level, max_lessons)
        for lesson in lessons:
            course.add_lesson(lesson)
        professor.add_course(course.name)
        logger.info("Course created: %s (ECTS=%d, Level=%s, Professor=%s)",
                    course.name, course.ects, course.level.name, professor.full_name)
        return course

    # Search

    @staticmethod
    def find_students_by_first_name(students: Iterable[Student], first_name: str) -> List[Student]:
        key = first_name.casefold()
        found = [s for s in students if s.first_name.casefold() == key]
        if not found:
            raise NotFoundError(f"Student not found: {first_name}")
        return found

    @staticmethod
    def find_professors_by_last_name(professors: Iterable[Professor], last_name: str) -> List[Professor]:
        key = last_name.casefold()
        found = [p for p in professors if p.last_name.casefold() == key]
        if not found:
            raise NotFoundError(f"Professor not found: {last_name}")
        return found

    @staticmethod
    def find_courses_by_name(courses: Iterable[Course], name: str) -> List[Course]:
        key = name.casefold()
        found = [c for c in courses if c.name.casefold() == key]
        if not found:
            raise NotFoundError(f"Course not found: {name}")
        return found

    # Aggregates

    @staticmethod
    def total_max_courses(students: Iterable[Student]) -> int:
        """Cumulative course capacity across ``students``."""
        return sum(s.max_courses for s in students)

    @staticmethod
    def total_ects(courses: Iterable[Course]) -> int:
        return sum(c.ects for c in courses)

    @staticmethod
    def average_enrollment(courses: Iterable[Course]) -> float:
        counts = [c.enrollment_count for c in courses]
        return sum(counts) / len(counts) if counts else 0.0

    @staticmethod
    def most_popular_course(courses: Iterable[Course]) -> Optional[Course]:
        courses = list(courses)
        if not courses:
            return None
        return max(courses, key=lambda c: c.enrollment_count)

    @staticmethod
    def group_by_level(courses: Iterable[Course]) -> Dict[CourseLevel, List[Course]]:
        groups: Dict[CourseLevel, List[Course]] = defaultdict(list)
        for course in courses:
            groups[course.level].append(course)
        return dict(groups)

    @staticmethod
    def group_by_professor(courses: Iterable[Course]) -> Dict[str, List[Course]]:
        groups: Dict[str, List[Course]] = defaultdict(list)
        for course in courses:
            groups[course.professor.full_name].append(course)
        return dict(groups)

    @staticmethod
    def sort_by_level(courses: Iterable[Course]) -> List[Course]:
        return sorted(courses, key=lambda c: c.level)

    @staticmethod
    def sort_by_ects(courses: Iterable[Course]) -> List[Course]:
        return sorted(courses, key=lambda c: c.ects, reverse=True)
