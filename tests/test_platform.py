import json
import logging
import os
import shutil
import tempfile
import unittest
from unittest import mock

from pydantic import ValidationError as ConfigValidationError

from registrar.config import StoreConfig, config, configure_logging
from registrar.core.entities import Course
from registrar.core.enums import EnrollmentStatus, GradeType, Semester
from registrar.core.exceptions import DataLoadError, DuplicateError, NotFoundError
from registrar.main import RecordsPlatform, main
from registrar.persistence import JsonStore

from factories import build_registry


class RecordsPlatformTests(unittest.TestCase):
    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        self.platform = RecordsPlatform({'data_dir': self.data_dir})

    def tearDown(self):
        shutil.rmtree(self.data_dir, ignore_errors=True)

    def populate(self):
        sample = build_registry()
        self.platform.registry.replace_all(sample.students, sample.professors,
                                           sample.courses, sample.enrollments)

    def test_enroll_and_grade_update_the_registry(self):
        self.populate()
        registry = self.platform.registry
        student = registry.find_student(10)
        course = registry.find_course("Math")

        physics = Course("Physics", registry.find_professor(1), 4)
        registry.add_course(physics)
        enrollment = self.platform.enroll(student, physics, Semester.THIRD)
        self.assertIn(enrollment, registry.enrollments)

        graded = self.platform.grade(enrollment, GradeType.F)
        self.assertEqual(graded.status, EnrollmentStatus.FAILED)
        self.assertNotIn(enrollment, registry.enrollments)
        self.assertIn(graded, registry.enrollments)
        self.assertEqual(student.get_grade("Physics"), GradeType.F)
        self.assertTrue(course.has_student(student))

    def test_grading_a_stale_enrollment_changes_nothing(self):
        self.populate()
        registry = self.platform.registry
        grace = registry.find_student(10)
        stale = registry.find_enrollment(10, "Math")

        self.platform.grade(stale, GradeType.A)
        with self.assertRaises(NotFoundError):
            self.platform.grade(stale, GradeType.F)
        self.assertEqual(grace.get_grade("Math"), GradeType.A)
        self.assertEqual(registry.find_enrollment(10, "Math").grade, GradeType.A)

    def test_enrolling_twice_is_rejected_before_any_change(self):
        self.populate()
        registry = self.platform.registry
        grace = registry.find_student(10)
        math = registry.find_course("Math")
        with self.assertRaises(DuplicateError):
            self.platform.enroll(grace, math, Semester.THIRD)
        self.assertEqual(grace.enrolled_courses, ["Math"])
        self.assertEqual(registry.counts()['enrollments'], 1)

    def test_save_load_cycle(self):
        self.populate()
        self.assertTrue(self.platform.save().ok)
        other = RecordsPlatform(StoreConfig(data_dir=self.data_dir))
        other.load()
        self.assertEqual(other.registry.counts(), self.platform.registry.counts())

    def test_load_error_propagates(self):
        with open(os.path.join(self.data_dir, "professors.json"), "w", encoding="utf-8") as f:
            f.write("{")
        with self.assertRaises(DataLoadError):
            self.platform.load()

    def test_backup_restore_and_reset(self):
        self.populate()
        self.assertTrue(self.platform.backup())
        self.platform.save()
        self.assertTrue(self.platform.reset_all_data())
        self.assertTrue(self.platform.registry.is_empty())
        self.assertFalse(os.path.exists(os.path.join(self.data_dir, "students.json")))
        self.assertTrue(self.platform.snapshots.backup_exists())

        self.assertTrue(self.platform.restore())
        self.assertEqual(self.platform.registry.counts()['students'], 1)
        self.assertTrue(os.path.exists(os.path.join(self.data_dir, "students.json")))

    def test_summary(self):
        self.populate()
        summary = self.platform.summary()
        self.assertEqual(summary['students'], 1)
        self.assertEqual(summary['total_max_courses'], 3)
        self.assertEqual(summary['total_ects'], 6)
        self.assertAlmostEqual(summary['average_gpa'], 3.5)
        self.assertEqual(summary['enrollments_by_status']['COMPLETED'], 1)
        self.assertFalse(summary['backup_available'])


class MainTests(unittest.TestCase):
    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        patcher = mock.patch("registrar.main.configure_logging")
        self.configure_logging = patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        shutil.rmtree(self.data_dir, ignore_errors=True)

    def test_backup_flag(self):
        self.assertEqual(main(["--data-dir", self.data_dir, "--backup"]), 0)
        self.assertTrue(os.path.exists(os.path.join(self.data_dir, "backup.dat")))

    def test_restore_without_backup_fails(self):
        self.assertEqual(main(["--data-dir", self.data_dir, "--restore"]), 1)

    def test_corrupt_data_fails(self):
        with open(os.path.join(self.data_dir, "courses.json"), "w", encoding="utf-8") as f:
            f.write("not json")
        self.assertEqual(main(["--data-dir", self.data_dir]), 1)

    def test_restore_ignores_corrupt_data_files(self):
        platform = RecordsPlatform({'data_dir': self.data_dir})
        sample = build_registry()
        platform.registry.replace_all(sample.students, sample.professors,
                                      sample.courses, sample.enrollments)
        self.assertTrue(platform.backup())
        with open(os.path.join(self.data_dir, "students.json"), "w", encoding="utf-8") as f:
            f.write("garbage")

        self.assertEqual(main(["--data-dir", self.data_dir, "--restore"]), 0)
        self.assertEqual(len(JsonStore(self.data_dir).load_students()), 1)

    def test_profile_preset(self):
        self.assertEqual(main(["--profile", "testing", "--data-dir", self.data_dir, "--backup"]), 0)
        self.configure_logging.assert_called_once_with("WARNING", None)

    def test_profile_from_environment(self):
        with mock.patch.dict(os.environ, {"REGISTRAR_CONFIG": "development"}):
            self.assertEqual(main(["--data-dir", self.data_dir]), 0)
        self.configure_logging.assert_called_once_with("DEBUG", None)

    def test_config_file(self):
        config_path = os.path.join(self.data_dir, "config.json")
        backup_path = os.path.join(self.data_dir, "snapshots", "records.bak")
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump({"data_dir": self.data_dir, "backup_file": backup_path}, f)
        self.assertEqual(main(["--config", config_path, "--backup"]), 0)
        self.assertTrue(os.path.exists(backup_path))


class StoreConfigTests(unittest.TestCase):
    def test_defaults(self):
        settings = StoreConfig()
        self.assertEqual(settings.data_dir, "data")
        self.assertEqual(settings.backup_path, os.path.join("data", "backup.dat"))
        self.assertEqual(config['default'], settings)

    def test_from_env(self):
        env = {"REGISTRAR_DATA_DIR": "/srv/records", "REGISTRAR_LOG_LEVEL": "debug"}
        with mock.patch.dict(os.environ, env):
            settings = StoreConfig.from_env()
        self.assertEqual(settings.data_dir, "/srv/records")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_invalid_values(self):
        with self.assertRaises(ConfigValidationError):
            StoreConfig(log_level="LOUD")
        with self.assertRaises(ConfigValidationError):
            StoreConfig(data_dir="")

    def test_configure_logging_adds_file_handler(self):
        log_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, log_dir, True)
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            configure_logging("WARNING", os.path.join(log_dir, "logs", "registrar.log"))
            self.assertEqual(len(root.handlers), len(before) + 2)
            self.assertTrue(os.path.isdir(os.path.join(log_dir, "logs")))
        finally:
            for handler in root.handlers[len(before):]:
                root.removeHandler(handler)
                handler.close()
            root.setLevel(level)


if __name__ == "__main__":
    unittest.main()
