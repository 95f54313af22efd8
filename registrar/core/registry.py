"""
The live object graph: students, professors, courses and enrollments.
"""

from typing import Dict, Iterable, List, Optional

from .entities import Course, Enrollment, Professor, Student, User
from .exceptions import DuplicateError, NotFoundError


class Registry:
    """Holds the four top-level collections the rest of the package works on.

    Students and professors are kept unique by username (user equality);
    courses are unique by name. Enrollments are an ordered list of immutable
    values and are replaced, not mutated, when they change.
    """

    def __init__(self):
        self._students: List[Student] = []
        self._professors: List[Professor] = []
        self._courses: List[Course] = []
        self._enrollments: List[Enrollment] = []

    @property
    def students(self) -> List[Student]:
        return list(self._students)

    @property
    def professors(self) -> List[Professor]:
        return list(self._professors)

    @property
    def courses(self) -> List[Course]:
        return list(self._courses)

    @property
    def enrollments(self) -> List[Enrollment]:
        return list(self._enrollments)

    @property
    def users(self) -> List[User]:
        """Professors followed by students."""
        return [*self._professors, *self._students]

    def is_empty(self) -> bool:
        return not (self._students or self._professors or self._courses or self._enrollments)

    def add_student(self, student: Student) -> None:
        if student in self._students:
            raise DuplicateError(f"Student with username {student.username} already exists")
        self._students.append(student)

    def add_professor(self, professor: Professor) -> None:
        if professor in self._professors:
            raise DuplicateError(f"Professor with username {professor.username} already exists")
        self._professors.append(professor)

    def add_course(self, course: Course) -> None:
        if self.find_course(course.name) is not None:
            raise DuplicateError(f"Course {course.name} already exists")
        self._courses.append(course)

    def add_enrollment(self, enrollment: Enrollment) -> None:
        if self.find_enrollment(*enrollment.key) is not None:
            raise DuplicateError(f"Enrollment for student {enrollment.student.id} in "
                                 f"{enrollment.course.name} already exists")
        self._enrollments.append(enrollment)

    def has_enrollment(self, enrollment: Enrollment) -> bool:
        """True when this exact enrollment value is in the registry."""
        return any(existing is enrollment for existing in self._enrollments)

    def replace_enrollment(self, old: Enrollment, new: Enrollment) -> None:
        """Swap ``old`` for ``new`` in place, keeping list order."""
        for index, existing in enumerate(self._enrollments):
            if existing is old:
                self._enrollments[index] = new
                return
        raise NotFoundError(f"Enrollment not found: {old}")

    def find_student(self, student_id: int) -> Optional[Student]:
        return next((s for s in self._students if s.id == student_id), None)

    def find_professor(self, professor_id: int) -> Optional[Professor]:
        return next((p for p in self._professors if p.id == professor_id), None)

    def find_course(self, name: str) -> Optional[Course]:
        return next((c for c in self._courses if c.name == name), None)

    def find_user(self, username: str) -> Optional[User]:
        return next((u for u in self.users if u.username == username), None)

    def find_enrollment(self, student_id: int, course_name: str) -> Optional[Enrollment]:
        return next((e for e in self._enrollments if e.key == (student_id, course_name)), None)

    def enrollments_for(self, student: Student) -> List[Enrollment]:
        return [e for e in self._enrollments if e.student == student]

    def total_max_courses(self) -> int:
        """Sum of every student's course capacity."""
        return sum(student.max_courses for student in self._students)

    def counts(self) -> Dict[str, int]:
        return {
            'students': len(self._students),
            'professors': len(self._professors),
            'courses': len(self._courses),
            'enrollments': len(self._enrollments),
        }

    def clear(self) -> None:
        self._students.clear()
        self._professors.clear()
        self._courses.clear()
        self._enrollments.clear()

    def replace_all(self, students: Iterable[Student], professors: Iterable[Professor],
                    courses: Iterable[Course], enrollments: Iterable[Enrollment]) -> None:
        """Swap in a complete graph at once.

        The arguments are materialised before anything is cleared, so a failing
        iterable leaves the current collections untouched.
        """
        students, professors = list(students), list(professors)
        courses, enrollments = list(courses), list(enrollments)
        self._students = students
        self._professors = professors
        self._courses = courses
        self._enrollments = enrollments
