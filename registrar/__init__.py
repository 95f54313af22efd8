"""
Registrar: an academic records store

Students, professors, courses, lessons and enrollments kept as a consistent
object graph, persisted to flat JSON files with full-snapshot backups.
"""

__version__ = "1.0.0"
__author__ = "Registrar Development Team"
__description__ = "Academic records store with JSON persistence and backups"
