import os
import pickle
import shutil
import struct
import tempfile
import unittest
from unittest import mock

from registrar.core.entities import Professor
from registrar.core.enums import GradeType
from registrar.core.exceptions import SnapshotError
from registrar.core.registry import Registry
from registrar.persistence import JsonStore, SnapshotManager, decode_snapshot, encode_snapshot
from registrar.persistence.snapshot_manager import FORMAT_VERSION, MAGIC, Snapshot, _RestrictedUnpickler

from factories import build_registry


class SnapshotManagerTests(unittest.TestCase):
    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        self.store = JsonStore(self.data_dir)
        self.backup_file = os.path.join(self.data_dir, "backup.dat")
        self.manager = SnapshotManager(self.backup_file, self.store)

    def tearDown(self):
        shutil.rmtree(self.data_dir, ignore_errors=True)

    def write_backup(self, blob: bytes):
        with open(self.backup_file, "wb") as f:
            f.write(blob)

    def test_backup_and_restore(self):
        original = build_registry()
        self.assertFalse(self.manager.backup_exists())
        self.assertTrue(self.manager.create_backup(original))
        self.assertTrue(self.manager.backup_exists())

        registry = Registry()
        registry.add_professor(Professor("Temp", "Person", 99, "temp", 1))
        self.assertTrue(self.manager.restore_backup(registry))
        self.assertEqual(registry.counts(), original.counts())
        self.assertIsNone(registry.find_professor(99))

        enrollment = registry.enrollments[0]
        self.assertIs(enrollment.student, registry.find_student(10))
        self.assertIs(enrollment.course, registry.find_course("Math"))
        self.assertIs(enrollment.course.professor, registry.find_professor(1))
        self.assertEqual(enrollment.grade, GradeType.B)

        # restore re-saves the JSON files
        reloaded = Registry()
        self.store.load_all(reloaded)
        self.assertEqual(reloaded.counts(), original.counts())

    def test_restore_without_backup(self):
        registry = build_registry()
        with self.assertLogs("registrar.persistence.snapshot_manager", level="WARNING"):
            self.assertFalse(self.manager.restore_backup(registry))
        self.assertEqual(registry.counts()['students'], 1)

    def test_corrupt_backup_leaves_registry_unchanged(self):
        registry = build_registry()
        before = (registry.students, registry.professors, registry.courses, registry.enrollments)
        self.write_backup(MAGIC + struct.pack(">H", FORMAT_VERSION) + b"\x80\x05garbage")
        self.assertFalse(self.manager.restore_backup(registry))
        self.assertEqual((registry.students, registry.professors,
                          registry.courses, registry.enrollments), before)
        self.assertFalse(os.path.exists(os.path.join(self.data_dir, "students.json")))

    def assert_restore_refused(self, blob: bytes):
        registry = build_registry()
        before = (registry.students, registry.professors, registry.courses, registry.enrollments)
        self.write_backup(blob)
        with self.assertLogs("registrar.persistence.snapshot_manager", level="ERROR"):
            self.assertFalse(self.manager.restore_backup(registry))
        after = (registry.students, registry.professors, registry.courses, registry.enrollments)
        for old, new in zip(before, after):
            self.assertEqual(len(old), len(new))
            for old_item, new_item in zip(old, new):
                self.assertIs(old_item, new_item)
        self.assertFalse(os.path.exists(os.path.join(self.data_dir, "students.json")))

    def test_outdated_object_layout_is_refused(self):
        stale = build_registry()
        del stale.find_student(10).__dict__["_max_courses"]
        self.assert_restore_refused(encode_snapshot(Snapshot.of(stale)))

    def test_wrong_attribute_value_is_refused(self):
        stale = build_registry()
        stale.find_course("Math").__dict__["_level"] = "ADVANCED"
        self.assert_restore_refused(encode_snapshot(Snapshot.of(stale)))
        with self.assertRaises(SnapshotError):
            decode_snapshot(encode_snapshot(Snapshot.of(stale)))

    def test_oversized_frame_is_refused(self):
        # FRAME opcode with a length no buffer can hold
        frame = b"\x80\x04\x95" + b"\xff" * 8
        self.assert_restore_refused(MAGIC + struct.pack(">H", FORMAT_VERSION) + frame)

    def test_any_unpickling_failure_is_refused(self):
        blob = encode_snapshot(Snapshot.of(build_registry()))
        for error in (MemoryError(), RecursionError("too deep"), OverflowError("frame")):
            with mock.patch.object(_RestrictedUnpickler, "load", side_effect=error):
                self.assert_restore_refused(blob)

    def test_bad_header(self):
        registry = build_registry()
        self.write_backup(b"not a snapshot at all")
        self.assertFalse(self.manager.restore_backup(registry))
        self.write_backup(b"REG")
        self.assertFalse(self.manager.restore_backup(registry))
        self.assertEqual(registry.counts()['enrollments'], 1)

    def test_version_mismatch(self):
        blob = encode_snapshot(Snapshot.of(build_registry()))
        future = MAGIC + struct.pack(">H", FORMAT_VERSION + 1) + blob[len(MAGIC) + 2:]
        with self.assertRaises(SnapshotError) as ctx:
            decode_snapshot(future)
        self.assertEqual(ctx.exception.details["version"], FORMAT_VERSION + 1)

    def test_foreign_globals_are_refused(self):
        payload = pickle.dumps({"students": [], "professors": [], "courses": [],
                                "enrollments": [], "created_at": None, "evil": os.getcwd})
        with self.assertRaises(SnapshotError):
            decode_snapshot(MAGIC + struct.pack(">H", FORMAT_VERSION) + payload)

    def test_wrong_collection_types(self):
        payload = pickle.dumps({"students": ["grace"], "professors": [], "courses": [], "enrollments": []})
        with self.assertRaises(SnapshotError):
            decode_snapshot(MAGIC + struct.pack(">H", FORMAT_VERSION) + payload)

    def test_dangling_references(self):
        registry = build_registry()
        snapshot = Snapshot.of(registry)
        snapshot.students = []
        with self.assertRaises(SnapshotError):
            decode_snapshot(encode_snapshot(snapshot))


if __name__ == "__main__":
    unittest.main()
