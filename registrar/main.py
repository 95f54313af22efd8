"""
Main entry point for the records store.
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Optional, Union

from .config import StoreConfig, config, configure_logging
from .core.entities import Course, Enrollment, Student
from .core.enums import GradeType, Semester
from .core.exceptions import DataLoadError, DuplicateError, NotFoundError
from .core.registry import Registry
from .persistence import JsonStore, SaveReport, SnapshotManager
from .services import AssignmentService, CatalogService, EnrollmentService, GradingService

logger = logging.getLogger(__name__)


class RecordsPlatform:
    """Wires the registry, the JSON store, backups and the services together."""

    def __init__(self, config: Optional[Union[StoreConfig, Dict[str, Any]]] = None):
        if isinstance(config, StoreConfig):
            self._config = config
        else:
            self._config = StoreConfig.model_validate(config or {})
        self._registry = Registry()
        self._store = JsonStore(self._config.data_dir)
        self._snapshots = SnapshotManager(self._config.backup_path, self._store)
        self._enrollment_service = EnrollmentService()
        self._grading_service = GradingService()
        self._catalog_service = CatalogService()
        self._assignment_service = AssignmentService()

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def store(self) -> JsonStore:
        return self._store

    @property
    def snapshots(self) -> SnapshotManager:
        return self._snapshots

    @property
    def enrollment_service(self) -> EnrollmentService:
        return self._enrollment_service

    @property
    def grading_service(self) -> GradingService:
        return self._grading_service

    @property
    def catalog_service(self) -> CatalogService:
        return self._catalog_service

    @property
    def assignment_service(self) -> AssignmentService:
        return self._assignment_service

    def load(self) -> None:
        """Replace the registry with what is on disk; raises ``DataLoadError``."""
        self._store.load_all(self._registry)
        logger.info("Records loaded from %s", self._config.data_dir)

    def save(self) -> SaveReport:
        return self._store.save_all(self._registry)

    def backup(self) -> bool:
        return self._snapshots.create_backup(self._registry)

    def restore(self) -> bool:
        return self._snapshots.restore_backup(self._registry)

    def reset_all_data(self) -> bool:
        """Empty the registry and delete every data file. The backup is kept."""
        self._registry.clear()
        deleted = self._store.delete_all()
        logger.info("All data reset")
        return deleted

    def enroll(self, student: Student, course: Course, semester: Union[Semester, int],
               pending: bool = False) -> Enrollment:
        """Enroll and record the new enrollment in the registry."""
        if self._registry.find_enrollment(student.id, course.name) is not None:
            raise DuplicateError(f"Student {student.id} already has an enrollment in {course.name}")
        enrollment = self._enrollment_service.enroll_student(student, course, semester, pending)
        self._registry.add_enrollment(enrollment)
        return enrollment

    def grade(self, enrollment: Enrollment, grade: GradeType) -> Enrollment:
        """Grade an enrollment and swap the graded value into the registry.

        Raises ``NotFoundError`` before any grade is written when ``enrollment``
        is no longer the value held by the registry.
        """
        if not self._registry.has_enrollment(enrollment):
            raise NotFoundError(f"Enrollment not found: {enrollment}")
        graded = self._grading_service.grade_enrollment(enrollment, grade)
        self._registry.replace_enrollment(enrollment, graded)
        return graded

    def summary(self) -> Dict[str, Any]:
        """Get platform statistics."""
        students = self._registry.students
        stats: Dict[str, Any] = dict(self._registry.counts())
        stats['total_max_courses'] = self._registry.total_max_courses()
        stats['total_ects'] = self._catalog_service.total_ects(self._registry.courses)
        stats['average_gpa'] = self._grading_service.average_gpa(students)
        stats['enrollments_by_status'] = self._enrollment_service.get_statistics(
            self._registry.enrollments)['by_status']
        stats['backup_available'] = self._snapshots.backup_exists()
        return stats


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Academic records store")
    parser.add_argument("--profile", choices=sorted(config),
                        default=os.environ.get("REGISTRAR_CONFIG", "default"),
                        help="Preset the configuration starts from")
    parser.add_argument("--config", type=str, help="Configuration file path (JSON)")
    parser.add_argument("--data-dir", type=str, help="Directory holding the JSON data files")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--backup", action="store_true", help="Create a backup after loading")
    group.add_argument("--restore", action="store_true",
                       help="Restore the last backup without reading the data files")

    args = parser.parse_args(argv)

    # Load configuration
    values: Dict[str, Any] = config[args.profile].model_dump()
    if args.config:
        with open(args.config, "r", encoding="utf-8") as f:
            values.update(json.load(f))
    store_config = StoreConfig.from_env(StoreConfig.model_validate(values))
    if args.data_dir:
        store_config = store_config.model_copy(update={"data_dir": args.data_dir})

    configure_logging(store_config.log_level, store_config.log_file)
    platform = RecordsPlatform(store_config)

    # a restore replaces the whole graph, so damaged data files must not block it
    if args.restore:
        if not platform.restore():
            return 1
    else:
        try:
            platform.load()
        except DataLoadError as e:
            logger.error("Could not load %s: %s", e.filename, e.message)
            return 1
        if args.backup and not platform.backup():
            return 1

    for key, value in platform.summary().items():
        logger.info("%s: %s", key, value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
