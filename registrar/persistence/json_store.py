"""
JSON file gateway: projects the object graph onto five flat record files and
rebuilds a cross-referenced graph from them.

Load order matters. Professors come first so courses can resolve their
professor ID; lessons attach to loaded courses; enrollments resolve both a
student and a course. Records whose reference cannot be resolved are dropped
with a warning. A file that is present but unreadable, malformed or
inconsistent aborts with ``DataLoadError``.
"""

import json
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Type, TypeVar

from pydantic import ValidationError as RecordValidationError

from ..core.entities import Course, Enrollment, Lesson, Professor, Student, User
from ..core.enums import CourseLevel, EnrollmentStatus, GradeType, LessonType, Semester
from ..core.exceptions import DataLoadError, DuplicateError, PersistenceError, RegistrarException
from ..core.registry import Registry
from . import codec
from .atomic import atomic_write, ensure_directory
from .records import (
    CourseRecord, EnrollmentRecord, FlatRecord, LessonRecord, ProfessorRecord, StudentRecord,
)

logger = logging.getLogger(__name__)

PROFESSORS_FILE = "professors.json"
COURSES_FILE = "courses.json"
LESSONS_FILE = "lessons.json"
STUDENTS_FILE = "students.json"
ENROLLMENTS_FILE = "enrollments.json"

DATA_FILES = (PROFESSORS_FILE, COURSES_FILE, LESSONS_FILE, STUDENTS_FILE, ENROLLMENTS_FILE)

R = TypeVar('R', bound=FlatRecord)


@dataclass
class SaveReport:
    """Outcome of a full save, one flag per data file."""
    results: Dict[str, bool] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(self.results.values())

    @property
    def failed_files(self) -> List[str]:
        return [name for name, saved in self.results.items() if not saved]


class JsonStore:
    """Reads and writes the records store under ``data_dir``."""

    def __init__(self, data_dir: str):
        self._data_dir = data_dir
        ensure_directory(self._data_dir)

    @property
    def data_dir(self) -> str:
        return self._data_dir

    def path_for(self, filename: str) -> str:
        return os.path.join(self._data_dir, filename)

    # Reading

    def _read_records(self, filename: str, record_cls: Type[R]) -> List[R]:
        path = self.path_for(filename)
        if not os.path.exists(path):
            logger.info("No %s found.", filename)
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise DataLoadError(f"Failed to read {filename}: {str(e)}", filename, e) from e

        if raw is None:
            return []
        if not isinstance(raw, list):
            raise DataLoadError(f"Invalid JSON format in {filename}: expected a list of records", filename)
        try:
            return [record_cls.model_validate(item) for item in raw]
        except RecordValidationError as e:
            raise DataLoadError(f"Invalid record in {filename}: {str(e)}", filename, e) from e

    @contextmanager
    def _building(self, filename: str) -> Iterator[None]:
        """Turn domain and decoding errors raised while rebuilding into ``DataLoadError``."""
        try:
            yield
        except (RegistrarException, ValueError) as e:
            message = e.message if isinstance(e, RegistrarException) else str(e)
            raise DataLoadError(f"Inconsistent data in {filename}: {message}", filename, e) from e

    @staticmethod
    def _check_unique_user(loaded: Sequence[User], user: User) -> None:
        for existing in loaded:
            if existing == user or existing.id == user.id:
                raise DuplicateError(
                    f"Duplicate user: id={user.id}, username={user.username}")

    def load_professors(self) -> List[Professor]:
        records = self._read_records(PROFESSORS_FILE, ProfessorRecord)
        professors: List[Professor] = []
        with self._building(PROFESSORS_FILE):
            for record in records:
                professor = Professor(record.first_name, record.last_name, record.id, record.username,
                                      record.max_courses, record.password, record.email)
                for course_name in record.teaching_courses or []:
                    professor.add_course(course_name)
                self._check_unique_user(professors, professor)
                professors.append(professor)
        logger.info("Loaded %d professors", len(professors))
        return professors

    def load_courses(self, professors: Sequence[Professor]) -> List[Course]:
        records = self._read_records(COURSES_FILE, CourseRecord)
        by_id = {p.id: p for p in professors}
        courses: Dict[str, Course] = {}
        with self._building(COURSES_FILE):
            for record in records:
                professor = by_id.get(record.professor_id)
                if professor is None:
                    logger.warning("Professor ID %d not found for course %s", record.professor_id, record.name)
                    continue
                if record.name in courses:
                    raise DuplicateError(f"Duplicate course: {record.name}")
                courses[record.name] = Course(record.name, professor, record.ects,
                                              codec.decode_enum(CourseLevel, record.level),
                                              record.max_lessons)
        logger.info("Loaded %d courses", len(courses))
        return list(courses.values())

    def load_lessons(self, courses: Sequence[Course]) -> int:
        """Attach lessons to ``courses`` and return how many were attached."""
        records = self._read_records(LESSONS_FILE, LessonRecord)
        by_name = {c.name: c for c in courses}
        attached = 0
        with self._building(LESSONS_FILE):
            for record in records:
                course = by_name.get(record.course_name)
                if course is None:
                    logger.warning("Course %s not found for lesson %s", record.course_name, record.name)
                    continue
                lesson = Lesson(record.name, record.length_minutes,
                                codec.decode_enum(LessonType, record.type))
                if record.scheduled_date is not None and record.scheduled_time is not None:
                    start = codec.decode_time(record.scheduled_time)
                    lesson.schedule(codec.decode_date(record.scheduled_date), start.hour, start.minute)
                course.add_lesson(lesson)
                attached += 1
        logger.info("Loaded %d lessons", attached)
        return attached

    def load_students(self) -> List[Student]:
        records = self._read_records(STUDENTS_FILE, StudentRecord)
        students: List[Student] = []
        with self._building(STUDENTS_FILE):
            for record in records:
                student = Student(record.first_name, record.last_name, record.id, record.username,
                                  record.password, record.email, record.max_courses)
                for course_name in record.enrolled_courses or []:
                    student.enroll_course(course_name)
                for course_name, grade in (record.course_grades or {}).items():
                    student.set_grade(course_name, codec.decode_enum(GradeType, grade))
                self._check_unique_user(students, student)
                students.append(student)
        logger.info("Loaded %d students", len(students))
        return students

    def load_enrollments(self, students: Sequence[Student], courses: Sequence[Course]) -> List[Enrollment]:
        records = self._read_records(ENROLLMENTS_FILE, EnrollmentRecord)
        students_by_id = {s.id: s for s in students}
        courses_by_name = {c.name: c for c in courses}
        enrollments: List[Enrollment] = []
        with self._building(ENROLLMENTS_FILE):
            for record in records:
                student = students_by_id.get(record.student_id)
                course = courses_by_name.get(record.course_name)
                if student is None or course is None:
                    logger.warning("Skipping enrollment of student %d in %s: unresolved reference",
                                   record.student_id, record.course_name)
                    continue
                enrollment = Enrollment(
                    student, course,
                    codec.decode_enum(Semester, record.semester),
                    codec.decode_enum(EnrollmentStatus, record.status),
                    codec.decode_enum(GradeType, record.grade),
                    codec.decode_datetime(record.enrollment_date),
                    codec.decode_datetime(record.completion_date),
                )
                course.enroll_student(student)
                enrollments.append(enrollment)
        logger.info("Loaded %d enrollments", len(enrollments))
        return enrollments

    def load_all(self, registry: Registry) -> None:
        """Rebuild the whole graph and swap it into ``registry``.

        The registry is only touched once every file has loaded.
        """
        professors = self.load_professors()
        courses = self.load_courses(professors)
        self.load_lessons(courses)
        students = self.load_students()
        enrollments = self.load_enrollments(students, courses)
        registry.replace_all(students, professors, courses, enrollments)

    # Writing

    def _write_records(self, filename: str, records: Sequence[FlatRecord]) -> bool:
        payload = json.dumps([r.to_json_dict() for r in records], indent=2, ensure_ascii=False)
        try:
            atomic_write(self.path_for(filename), payload.encode("utf-8"))
        except PersistenceError as e:
            logger.error("Failed to save %s: %s", filename, e.message)
            return False
        logger.info("Saved %d records to %s", len(records), filename)
        return True

    @staticmethod
    def professor_record(professor: Professor) -> ProfessorRecord:
        return ProfessorRecord(
            id=professor.id, first_name=professor.first_name, last_name=professor.last_name,
            username=professor.username, password=professor.password, email=professor.email,
            max_courses=professor.max_courses, teaching_courses=professor.teaching_courses,
        )

    @staticmethod
    def student_record(student: Student) -> StudentRecord:
        return StudentRecord(
            id=student.id, first_name=student.first_name, last_name=student.last_name,
            username=student.username, password=student.password, email=student.email,
            max_courses=student.max_courses, enrolled_courses=student.enrolled_courses,
            course_grades={name: codec.encode_enum(g) for name, g in student.course_grades.items()},
        )

    @staticmethod
    def course_record(course: Course) -> CourseRecord:
        return CourseRecord(
            name=course.name, professor_id=course.professor.id, max_lessons=course.max_lessons,
            ects=course.ects, level=codec.encode_enum(course.level), lesson_names=course.lesson_names,
        )

    @staticmethod
    def lesson_record(course: Course, lesson: Lesson) -> LessonRecord:
        start = lesson.start_time
        return LessonRecord(
            name=lesson.name, course_name=course.name, length_minutes=lesson.length_minutes,
            type=codec.encode_enum(lesson.lesson_type),
            scheduled_date=codec.encode_date(start.date()) if start else None,
            scheduled_time=codec.encode_time(start.time()) if start else None,
        )

    @staticmethod
    def enrollment_record(enrollment: Enrollment) -> EnrollmentRecord:
        return EnrollmentRecord(
            student_id=enrollment.student.id, course_name=enrollment.course.name,
            semester=codec.encode_enum(enrollment.semester),
            status=codec.encode_enum(enrollment.status),
            grade=codec.encode_enum(enrollment.grade),
            enrollment_date=codec.encode_datetime(enrollment.enrollment_date),
            completion_date=codec.encode_datetime(enrollment.completion_date),
        )

    def save_professors(self, professors: Sequence[Professor]) -> bool:
        return self._write_records(PROFESSORS_FILE, [self.professor_record(p) for p in professors])

    def save_students(self, students: Sequence[Student]) -> bool:
        return self._write_records(STUDENTS_FILE, [self.student_record(s) for s in students])

    def save_courses(self, courses: Sequence[Course]) -> bool:
        return self._write_records(COURSES_FILE, [self.course_record(c) for c in courses])

    def save_lessons(self, courses: Sequence[Course]) -> bool:
        records = [self.lesson_record(c, lesson) for c in courses for lesson in c.lessons]
        return self._write_records(LESSONS_FILE, records)

    def save_enrollments(self, enrollments: Sequence[Enrollment]) -> bool:
        return self._write_records(ENROLLMENTS_FILE, [self.enrollment_record(e) for e in enrollments])

    def save_all(self, registry: Registry) -> SaveReport:
        """Write every file; a failure on one file does not stop the rest."""
        courses = registry.courses
        report = SaveReport()
        report.results[PROFESSORS_FILE] = self.save_professors(registry.professors)
        report.results[COURSES_FILE] = self.save_courses(courses)
        report.results[LESSONS_FILE] = self.save_lessons(courses)
        report.results[STUDENTS_FILE] = self.save_students(registry.students)
        report.results[ENROLLMENTS_FILE] = self.save_enrollments(registry.enrollments)
        if not report.ok:
            logger.error("Save incomplete, failed files: %s", ", ".join(report.failed_files))
        return report

    def delete_all(self) -> bool:
        """Remove every data file; returns False if any removal failed."""
        deleted = True
        for filename in DATA_FILES:
            path = self.path_for(filename)
            if not os.path.exists(path):
                continue
            try:
                os.remove(path)
            except OSError as e:
                logger.error("Failed to delete %s: %s", filename, str(e))
                deleted = False
        return deleted
