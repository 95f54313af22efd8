"""Sample object graphs shared by the persistence tests."""

from datetime import date, datetime

from registrar.core.entities import Course, Enrollment, Lesson, Professor, Student
from registrar.core.enums import CourseLevel, GradeType, LessonType, Semester
from registrar.core.registry import Registry


def build_registry() -> Registry:
    """One professor teaching one course with two lessons and one graded student."""
    registry = Registry()
    ada = Professor("Ada", "Lovelace", 1, "alovelace", max_courses=3, email="ada@uni.edu")
    ada.add_course("Math")
    registry.add_professor(ada)

    math = Course("Math", ada, 6, CourseLevel.ADVANCED, max_lessons=10)
    intro = Lesson("Intro", 90, LessonType.SEMINAR)
    intro.schedule(date(2024, 10, 1), 9, 5)
    math.add_lesson(intro)
    math.add_lesson(Lesson("Proofs", 60))
    registry.add_course(math)

    grace = Student("Grace", "Hopper", 10, "ghopper", password="pw", max_courses=3)
    grace.enroll_course("Math")
    registry.add_student(grace)
    math.enroll_student(grace)
    enrollment = Enrollment(grace, math, Semester.SECOND, enrollment_date=datetime(2024, 9, 1, 8, 30))
    grace.set_grade("Math", GradeType.B)
    registry.add_enrollment(enrollment.with_grade(GradeType.B))
    return registry
