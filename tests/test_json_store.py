import json
import os
import shutil
import tempfile
import unittest
from datetime import datetime

from registrar.core.enums import CourseLevel, EnrollmentStatus, GradeType, Semester
from registrar.core.exceptions import DataLoadError
from registrar.core.registry import Registry
from registrar.persistence import DATA_FILES, JsonStore
from registrar.persistence import codec

from factories import build_registry


class JsonStoreTests(unittest.TestCase):
    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        self.store = JsonStore(self.data_dir)

    def tearDown(self):
        shutil.rmtree(self.data_dir, ignore_errors=True)

    def write(self, filename, content):
        with open(os.path.join(self.data_dir, filename), "w", encoding="utf-8") as f:
            f.write(content if isinstance(content, str) else json.dumps(content))

    def read(self, filename):
        with open(os.path.join(self.data_dir, filename), "r", encoding="utf-8") as f:
            return json.load(f)

    def test_save_then_load_round_trip(self):
        original = build_registry()
        report = self.store.save_all(original)
        self.assertTrue(report.ok)
        self.assertEqual(set(report.results), set(DATA_FILES))

        loaded = Registry()
        self.store.load_all(loaded)
        self.assertEqual(loaded.counts(), original.counts())

        ada = loaded.find_professor(1)
        self.assertEqual(ada.teaching_courses, ["Math"])
        self.assertEqual(ada.email, "ada@uni.edu")
        math = loaded.find_course("Math")
        self.assertIs(math.professor, ada)
        self.assertEqual(math.level, CourseLevel.ADVANCED)
        self.assertEqual(math.lesson_names, ["Intro", "Proofs"])
        self.assertEqual(math.get_lesson("Intro").start_time, datetime(2024, 10, 1, 9, 5))
        self.assertFalse(math.get_lesson("Proofs").is_scheduled)

        grace = loaded.find_student(10)
        self.assertEqual(grace.get_grade("Math"), GradeType.B)
        self.assertEqual(grace.password, "pw")
        self.assertTrue(math.has_student(grace))

        enrollment = loaded.enrollments[0]
        self.assertIs(enrollment.student, grace)
        self.assertIs(enrollment.course, math)
        self.assertEqual(enrollment.status, EnrollmentStatus.COMPLETED)
        self.assertEqual(enrollment.enrollment_date, datetime(2024, 9, 1, 8, 30))
        self.assertEqual(enrollment.completion_date, original.enrollments[0].completion_date)

    def test_records_use_camel_case_and_enum_names(self):
        self.store.save_all(build_registry())
        course = self.read("courses.json")[0]
        self.assertEqual(course["professorId"], 1)
        self.assertEqual(course["level"], "ADVANCED")
        lesson = self.read("lessons.json")[0]
        self.assertEqual((lesson["scheduledDate"], lesson["scheduledTime"]), ("2024-10-01", "09:05"))
        enrollment = self.read("enrollments.json")[0]
        self.assertEqual(enrollment["semester"], "SECOND")
        self.assertEqual(enrollment["grade"], "B")
        self.assertEqual(self.read("students.json")[0]["courseGrades"], {"Math": "B"})

    def test_missing_files_load_empty(self):
        registry = Registry()
        self.store.load_all(registry)
        self.assertTrue(registry.is_empty())

    def test_orphan_records_are_dropped(self):
        self.write("professors.json", [
            {"id": 1, "firstName": "Ada", "lastName": "Lovelace", "username": "alovelace", "maxCourses": 2},
        ])
        self.write("courses.json", [
            {"name": "Math", "professorId": 1, "maxLessons": 5, "ects": 6, "level": "BEGINNER"},
            {"name": "Ghost", "professorId": 99, "maxLessons": 5, "ects": 6, "level": "BEGINNER"},
        ])
        self.write("lessons.json", [
            {"name": "Boo", "courseName": "Ghost", "lengthMinutes": 30, "type": "LECTURE"},
        ])
        self.write("students.json", [
            {"id": 10, "firstName": "Grace", "lastName": "Hopper", "username": "ghopper", "maxCourses": 5},
        ])
        self.write("enrollments.json", [
            {"studentId": 10, "courseName": "Math", "semester": "FIRST", "status": "ACTIVE",
             "grade": "NOT_GRADED", "enrollmentDate": "2024-09-01T08:30:00"},
            {"studentId": 99, "courseName": "Math", "semester": "FIRST", "status": "ACTIVE",
             "grade": "NOT_GRADED", "enrollmentDate": "2024-09-01T08:30:00"},
            {"studentId": 10, "courseName": "Ghost", "semester": "FIRST", "status": "ACTIVE",
             "grade": "NOT_GRADED", "enrollmentDate": "2024-09-01T08:30:00", "completionDate": None},
        ])
        registry = Registry()
        with self.assertLogs("registrar.persistence.json_store", level="WARNING"):
            self.store.load_all(registry)
        self.assertEqual([c.name for c in registry.courses], ["Math"])
        self.assertEqual(len(registry.enrollments), 1)
        self.assertEqual(registry.find_course("Math").enrollment_count, 1)

    def test_unknown_enum_name_is_a_load_error(self):
        self.write("professors.json", [
            {"id": 1, "firstName": "Ada", "lastName": "Lovelace", "username": "alovelace", "maxCourses": 2},
        ])
        self.write("courses.json", [
            {"name": "Math", "professorId": 1, "maxLessons": 5, "ects": 6, "level": "GALACTIC"},
        ])
        with self.assertRaises(DataLoadError) as ctx:
            self.store.load_courses(self.store.load_professors())
        self.assertEqual(ctx.exception.filename, "courses.json")
        self.assertIsInstance(ctx.exception.cause, ValueError)

    def test_corrupt_json_is_a_load_error(self):
        self.write("students.json", "[{not json")
        with self.assertRaises(DataLoadError) as ctx:
            self.store.load_students()
        self.assertEqual(ctx.exception.filename, "students.json")

    def test_wrong_shape_is_a_load_error(self):
        self.write("students.json", {"id": 1})
        with self.assertRaises(DataLoadError):
            self.store.load_students()
        self.write("students.json", [{"id": 1, "firstName": "Grace"}])
        with self.assertRaises(DataLoadError):
            self.store.load_students()

    def test_domain_violation_is_a_load_error(self):
        self.write("professors.json", [
            {"id": 1, "firstName": "Ada", "lastName": "Lovelace", "username": "alovelace",
             "maxCourses": 1, "teachingCourses": ["Math", "Physics"]},
        ])
        with self.assertRaises(DataLoadError):
            self.store.load_professors()

    def test_duplicate_users_are_a_load_error(self):
        record = {"id": 10, "firstName": "Grace", "lastName": "Hopper", "username": "ghopper", "maxCourses": 5}
        self.write("students.json", [record, dict(record, username="other")])
        with self.assertRaises(DataLoadError):
            self.store.load_students()

    def test_failed_load_leaves_registry_untouched(self):
        registry = build_registry()
        self.write("enrollments.json", "garbage")
        with self.assertRaises(DataLoadError):
            self.store.load_all(registry)
        self.assertEqual(registry.counts()['enrollments'], 1)

    def test_null_collection_fields_are_empty(self):
        self.write("students.json", [
            {"id": 10, "firstName": "Grace", "lastName": "Hopper", "username": "ghopper", "maxCourses": 5,
             "enrolledCourses": None, "courseGrades": None, "password": None},
        ])
        grace = self.store.load_students()[0]
        self.assertEqual(grace.enrolled_courses, [])
        self.assertEqual(grace.password, "")

    def test_delete_all(self):
        self.store.save_all(build_registry())
        self.assertTrue(self.store.delete_all())
        for filename in DATA_FILES:
            self.assertFalse(os.path.exists(os.path.join(self.data_dir, filename)))
        self.assertTrue(self.store.delete_all())

    def test_save_failure_is_reported_per_file(self):
        os.makedirs(os.path.join(self.data_dir, "lessons.json"))
        report = self.store.save_all(build_registry())
        self.assertFalse(report.ok)
        self.assertEqual(report.failed_files, ["lessons.json"])
        self.assertTrue(report.results["students.json"])


class CodecTests(unittest.TestCase):
    def test_time_format(self):
        self.assertEqual(codec.decode_time("07:45").hour, 7)
        with self.assertRaises(ValueError):
            codec.decode_time("07:45:00")

    def test_enum_by_name(self):
        self.assertEqual(codec.decode_enum(GradeType, codec.encode_enum(GradeType.A_PLUS)), GradeType.A_PLUS)
        with self.assertRaises(ValueError):
            codec.decode_enum(Semester, "SEVENTH")

    def test_optional_datetime(self):
        self.assertIsNone(codec.encode_datetime(None))
        self.assertIsNone(codec.decode_datetime(None))


if __name__ == "__main__":
    unittest.main()
