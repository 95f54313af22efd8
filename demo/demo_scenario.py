#!/usr/bin/env python3
"""
Demo scenario for the records store.
"""

import os
import sys
import tempfile
from datetime import date

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from registrar.config import configure_logging
from registrar.main import RecordsPlatform
from registrar.core.entities import Lesson, Professor, Student
from registrar.core.enums import CourseLevel, GradeType, LessonType, Semester
from registrar.core.exceptions import LimitExceededError


def run_demo(data_dir: str):
    """Run a walk through the records store."""
    print("=" * 60)
    print("ACADEMIC RECORDS STORE - DEMO")
    print("=" * 60)

    platform = RecordsPlatform({'data_dir': data_dir})

    print("\n1. Creating sample data...")
    create_sample_data(platform)

    print("\n2. Demonstrating enrollment...")
    demonstrate_enrollment(platform)

    print("\n3. Demonstrating grading...")
    demonstrate_grading(platform)

    print("\n4. Saving, backing up and restoring...")
    demonstrate_persistence(platform)

    print("\n5. Platform statistics...")
    show_statistics(platform)

    print("\n" + "=" * 60)
    print("DEMO COMPLETED SUCCESSFULLY!")
    print("=" * 60)


def create_sample_data(platform):
    """Create professors, courses with lessons and students."""
    registry = platform.registry
    catalog = platform.catalog_service

    professors = [
        Professor("Ada", "Lovelace", 1, "alovelace", max_courses=3, email="ada@university.edu"),
        Professor("Alan", "Turing", 2, "aturing", max_courses=2, email="alan@university.edu"),
    ]
    for professor in professors:
        registry.add_professor(professor)

    intro = Lesson("Introduction", 90)
    intro.schedule(date(2024, 10, 1), 9, 0)
    courses = [
        catalog.create_course("Programming I", professors[0], 6, CourseLevel.BEGINNER,
                              [intro, Lesson("Loops Lab", 120, LessonType.LAB)]),
        catalog.create_course("Algorithms", professors[1], 8, CourseLevel.ADVANCED,
                              [Lesson("Sorting", 90), Lesson("Midterm", 60, LessonType.EXAM)]),
        catalog.create_course("Databases", professors[0], 5, CourseLevel.INTERMEDIATE),
    ]
    for course in courses:
        registry.add_course(course)

    students = [
        Student("Grace", "Hopper", 101, "ghopper", max_courses=2),
        Student("Edsger", "Dijkstra", 102, "edijkstra"),
        Student("Barbara", "Liskov", 103, "bliskov"),
    ]
    for student in students:
        registry.add_student(student)

    print(f"  ✓ {registry.counts()}")


def demonstrate_enrollment(platform):
    """Enroll everybody and show the course limit."""
    courses = platform.registry.courses
    for student in platform.registry.students:
        for course in courses:
            try:
                enrollment = platform.enroll(student, course, Semester.FIRST)
                print(f"    {student.username} -> {course.name}: {enrollment.status}")
            except LimitExceededError as e:
                print(f"    {student.username} -> {course.name}: refused ({e.message})")


def demonstrate_grading(platform):
    """Grade every enrollment with a fixed pattern."""
    pattern = [GradeType.A_PLUS, GradeType.B, GradeType.F, GradeType.INCOMPLETE]
    for i, enrollment in enumerate(platform.registry.enrollments):
        graded = platform.grade(enrollment, pattern[i % len(pattern)])
        print(f"    {graded}")

    grading = platform.grading_service
    students = platform.registry.students
    print(f"  Average GPA: {grading.average_gpa(students):.2f}")
    print(f"  GPA ranges: { {k: len(v) for k, v in grading.group_students_by_gpa_range(students).items()} }")


def demonstrate_persistence(platform):
    """Save to JSON, back up, wipe everything and restore."""
    report = platform.save()
    print(f"  Saved files: {report.results}")
    print(f"  Backup created: {platform.backup()}")
    platform.reset_all_data()
    print(f"  After reset: {platform.registry.counts()}")
    print(f"  Restored: {platform.restore()}")
    platform.load()
    print(f"  Reloaded from JSON: {platform.registry.counts()}")


def show_statistics(platform):
    """Show platform statistics."""
    for key, value in platform.summary().items():
        print(f"    {key}: {value}")


if __name__ == "__main__":
    configure_logging("WARNING")
    with tempfile.TemporaryDirectory() as tmp:
        run_demo(tmp)
