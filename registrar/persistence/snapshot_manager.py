"""
Snapshot manager for full backups of the live object graph.

A backup file is ``MAGIC``, a big-endian format version and a pickled payload
holding the four collections. Restoring decodes and validates the whole file
before the live registry is touched.
"""

import io
import logging
import os
import pickle
import struct
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..core import enums
from ..core.entities import Course, Enrollment, Lesson, Professor, Student
from ..core.exceptions import PersistenceError, SnapshotError
from ..core.registry import Registry
from .atomic import atomic_write
from .json_store import JsonStore

logger = logging.getLogger(__name__)

MAGIC = b"REGSNAP\x00"
FORMAT_VERSION = 1
_HEADER = struct.Struct(">8sH")

_ALLOWED_GLOBALS = {
    (cls.__module__, cls.__name__)
    for cls in (Professor, Student, Lesson, Course, Enrollment, datetime, date)
}

# enum members travel as persistent IDs, never as pickled globals
_ENUMS = {cls.__name__: cls for cls in (enums.Role, enums.GradeType, enums.Semester,
                                        enums.CourseLevel, enums.LessonType, enums.EnrollmentStatus)}

@dataclass
class Snapshot:
    """Decoded backup contents, independent of any live registry."""
    students: List[Student] = field(default_factory=list)
    professors: List[Professor] = field(default_factory=list)
    courses: List[Course] = field(default_factory=list)
    enrollments: List[Enrollment] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    def of(cls, registry: Registry) -> "Snapshot":
        return cls(registry.students, registry.professors, registry.courses,
                   registry.enrollments, datetime.now())


class _SnapshotPickler(pickle.Pickler):
    """Writes enum members as ``(enum class name, member name)`` references."""

    def persistent_id(self, obj: Any) -> Optional[Tuple[str, str]]:
        if isinstance(obj, Enum) and type(obj).__name__ in _ENUMS:
            return type(obj).__name__, obj.name
        return None


class _RestrictedUnpickler(pickle.Unpickler):
    """Only resolves the domain classes a snapshot may contain."""

    def find_class(self, module: str, name: str) -> Any:
        if (module, name) in _ALLOWED_GLOBALS:
            return super().find_class(module, name)
        raise pickle.UnpicklingError(f"Forbidden global in snapshot: {module}.{name}")

    def persistent_load(self, pid: Any) -> Enum:
        try:
            enum_name, member_name = pid
            return _ENUMS[enum_name][member_name]
        except (TypeError, ValueError, KeyError):
            raise pickle.UnpicklingError(f"Unknown enum reference in snapshot: {pid!r}") from None


def encode_snapshot(snapshot: Snapshot) -> bytes:
    payload = {
        "created_at": snapshot.created_at,
        "students": snapshot.students,
        "professors": snapshot.professors,
        "courses": snapshot.courses,
        "enrollments": snapshot.enrollments,
    }
    buffer = io.BytesIO()
    buffer.write(_HEADER.pack(MAGIC, FORMAT_VERSION))
    _SnapshotPickler(buffer, protocol=pickle.HIGHEST_PROTOCOL).dump(payload)
    return buffer.getvalue()


def _typed_list(payload: Dict[str, Any], key: str, item_type: type) -> list:
    items = payload.get(key)
    if not isinstance(items, list):
        raise SnapshotError(f"Snapshot collection {key} is missing or not a list")
    for item in items:
        if not isinstance(item, item_type):
            raise SnapshotError(f"Snapshot collection {key} contains {type(item).__name__}")
    return items


def _check_state(snapshot: Snapshot) -> None:
    """Project every object onto its flat record, as saving would.

    Objects pickled from an older class layout unpickle fine but miss
    attributes or hold values the records reject.
    """
    try:
        for professor in snapshot.professors:
            JsonStore.professor_record(professor)
        for student in snapshot.students:
            JsonStore.student_record(student)
        for course in snapshot.courses:
            JsonStore.course_record(course)
            for lesson in course.lessons:
                JsonStore.lesson_record(course, lesson)
        for enrollment in snapshot.enrollments:
            JsonStore.enrollment_record(enrollment)
    except Exception as e:
        raise SnapshotError(f"Snapshot objects do not match the current layout: "
                            f"{type(e).__name__}: {str(e)}") from e


def decode_snapshot(blob: bytes) -> Snapshot:
    """Decode and validate a backup blob; raises ``SnapshotError``."""
    if len(blob) < _HEADER.size:
        raise SnapshotError("Snapshot is truncated")
    magic, version = _HEADER.unpack_from(blob)
    if magic != MAGIC:
        raise SnapshotError("Not a registrar snapshot")
    if version != FORMAT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version {version}, expected {FORMAT_VERSION}",
                            details={"version": version})
    try:
        payload = _RestrictedUnpickler(io.BytesIO(blob[_HEADER.size:])).load()
    except Exception as e:
        # corrupt frames surface as anything from UnpicklingError to MemoryError
        raise SnapshotError(f"Snapshot payload is corrupt: {type(e).__name__}: {str(e)}") from e
    if not isinstance(payload, dict):
        raise SnapshotError("Snapshot payload is not a mapping")

    snapshot = Snapshot(
        students=_typed_list(payload, "students", Student),
        professors=_typed_list(payload, "professors", Professor),
        courses=_typed_list(payload, "courses", Course),
        enrollments=_typed_list(payload, "enrollments", Enrollment),
        created_at=payload.get("created_at"),
    )
    _check_state(snapshot)

    # pickle keeps shared references, so links must point into the snapshot itself
    professor_ids = {id(p) for p in snapshot.professors}
    student_ids = {id(s) for s in snapshot.students}
    course_ids = {id(c) for c in snapshot.courses}
    for course in snapshot.courses:
        if id(course.professor) not in professor_ids:
            raise SnapshotError(f"Course {course.name} references an unknown professor")
    for enrollment in snapshot.enrollments:
        if id(enrollment.student) not in student_ids or id(enrollment.course) not in course_ids:
            raise SnapshotError(f"Enrollment {enrollment.key} references an unknown student or course")
    return snapshot


class SnapshotManager:
    """Creates and restores full backups of a registry."""

    def __init__(self, backup_file: str, store: JsonStore):
        self._backup_file = backup_file
        self._store = store

    @property
    def backup_file(self) -> str:
        return self._backup_file

    def backup_exists(self) -> bool:
        return os.path.isfile(self._backup_file)

    def create_backup(self, registry: Registry) -> bool:
        """Write a snapshot of ``registry``. Returns False on I/O failure."""
        snapshot = Snapshot.of(registry)
        try:
            atomic_write(self._backup_file, encode_snapshot(snapshot))
        except PersistenceError as e:
            logger.error("Backup failed: %s", e.message)
            return False
        logger.info("Backup created at %s (%d students, %d professors, %d courses, %d enrollments)",
                    self._backup_file, len(snapshot.students), len(snapshot.professors),
                    len(snapshot.courses), len(snapshot.enrollments))
        return True

    def read_backup(self) -> Snapshot:
        """Read and decode the backup file without touching any registry."""
        try:
            with open(self._backup_file, "rb") as f:
                blob = f.read()
        except OSError as e:
            raise SnapshotError(f"Failed to read backup {self._backup_file}: {str(e)}") from e
        return decode_snapshot(blob)

    def restore_backup(self, registry: Registry) -> bool:
        """Replace the contents of ``registry`` with the backup and re-save the JSON files.

        Returns False, leaving ``registry`` unchanged, when there is no backup
        or it cannot be decoded.
        """
        if not self.backup_exists():
            logger.warning("No backup file found at %s", self._backup_file)
            return False
        try:
            snapshot = self.read_backup()
        except SnapshotError as e:
            logger.error("Restore failed: %s", e.message)
            return False

        registry.replace_all(snapshot.students, snapshot.professors,
                             snapshot.courses, snapshot.enrollments)
        report = self._store.save_all(registry)
        if not report.ok:
            logger.warning("Backup restored but some data files were not saved: %s",
                           ", ".join(report.failed_files))
        logger.info("Backup restored from %s", self._backup_file)
        return True
