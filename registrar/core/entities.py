"""
Core entities of the academic records store.

People are modelled as an identity interface (``Person``) implemented by
``User``; ``Student`` and ``Professor`` are the two account variants and each
carries its own membership logic. ``Enrollment`` is an immutable value and
every lifecycle transition returns a new instance.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple, Union

from .enums import Role, GradeType, Semester, CourseLevel, LessonType, EnrollmentStatus
from .exceptions import ValidationError, DuplicateError, LimitExceededError, NotFoundError
from .validation import require_positive, require_text


class Person(ABC):
    """Identity shared by everybody in the records store."""

    @property
    @abstractmethod
    def first_name(self) -> str:
        pass

    @property
    @abstractmethod
    def last_name(self) -> str:
        pass

    @property
    @abstractmethod
    def id(self) -> int:
        pass

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Person):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return f"{self.full_name} ID: {self.id}"


class User(Person):
    """Person with an account.

    Users compare equal when their usernames match; ID, email and role are
    ignored.
    """

    def __init__(self, first_name: str, last_name: str, user_id: int, username: str,
                 password: str = "", email: str = "", role: Role = Role.ADMIN):
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise ValidationError("User ID must be an integer", details={"value": user_id})
        self._first_name = require_text(first_name, "First name")
        self._last_name = require_text(last_name, "Last name")
        self._id = user_id
        self._username = require_text(username, "Username")
        self._password = password or ""
        self._email = email or ""
        self._role = role

    @property
    def first_name(self) -> str:
        return self._first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    @property
    def id(self) -> int:
        return self._id

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> str:
        return self._password

    @property
    def email(self) -> str:
        return self._email

    @property
    def role(self) -> Role:
        return self._role

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._username == other._username

    def __hash__(self) -> int:
        return hash(self._username)

    def __str__(self) -> str:
        return f"{super().__str__()} ({self._username})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, username={self._username!r})"


class Professor(User):
    """Professor with a capped, insertion-ordered set of taught course names."""

    def __init__(self, first_name: str, last_name: str, user_id: int, username: str,
                 max_courses: int, password: str = "", email: str = ""):
        super().__init__(first_name, last_name, user_id, username, password, email, Role.PROFESSOR)
        self._max_courses = require_positive(max_courses, "maxCourses")
        self._teaching_courses: Dict[str, None] = {}

    @property
    def max_courses(self) -> int:
        return self._max_courses

    @property
    def teaching_courses(self) -> List[str]:
        return list(self._teaching_courses)

    @property
    def course_count(self) -> int:
        return len(self._teaching_courses)

    def teaches(self, course_name: str) -> bool:
        return course_name in self._teaching_courses

    def add_course(self, course_name: str) -> None:
        """Add a course to teach."""
        require_text(course_name, "Course name")
        if course_name in self._teaching_courses:
            raise DuplicateError(
                f"Professor {self.full_name} already teaches the course: {course_name}")
        if len(self._teaching_courses) >= self._max_courses:
            raise LimitExceededError(
                f"Professor {self.full_name} has reached the maximum number of courses ({self._max_courses})")
        self._teaching_courses[course_name] = None


class Student(User):
    """Student with capped course enrollments and a per-course grade map."""

    DEFAULT_MAX_COURSES = 5

    def __init__(self, first_name: str, last_name: str, user_id: int, username: str,
                 password: str = "", email: str = "", max_courses: int = DEFAULT_MAX_COURSES):
        super().__init__(first_name, last_name, user_id, username, password, email, Role.STUDENT)
        self._max_courses = require_positive(max_courses, "maxCourses")
        self._enrolled_courses: Dict[str, None] = {}
        self._course_grades: Dict[str, GradeType] = {}

    @property
    def max_courses(self) -> int:
        return self._max_courses

    @property
    def enrolled_courses(self) -> List[str]:
        return list(self._enrolled_courses)

    @property
    def course_grades(self) -> Dict[str, GradeType]:
        return dict(self._course_grades)

    @property
    def course_count(self) -> int:
        return len(self._enrolled_courses)

    @property
    def remaining_capacity(self) -> int:
        return self._max_courses - len(self._enrolled_courses)

    def is_enrolled(self, course_name: str) -> bool:
        return course_name in self._enrolled_courses

    def enroll_course(self, course_name: str) -> None:
        """Register for a course; the grade starts as NOT_GRADED."""
        require_text(course_name, "Course name")
        if course_name in self._enrolled_courses:
            raise DuplicateError(
                f"Student {self.full_name} is already enrolled in the course: {course_name}")
        if len(self._enrolled_courses) >= self._max_courses:
            raise LimitExceededError(
                f"Student {self.full_name} has reached the maximum number of courses ({self._max_courses})")
        self._enrolled_courses[course_name] = None
        self._course_grades[course_name] = GradeType.NOT_GRADED

    def set_grade(self, course_name: str, grade: GradeType) -> None:
        if course_name not in self._enrolled_courses:
            raise NotFoundError(f"Student {self.full_name} is not enrolled in course: {course_name}")
        if not isinstance(grade, GradeType):
            raise ValidationError(f"Invalid grade: {grade!r}")
        self._course_grades[course_name] = grade

    def get_grade(self, course_name: str) -> GradeType:
        return self._course_grades.get(course_name, GradeType.NOT_GRADED)

    def calculate_gpa(self) -> float:
        """Average grade point over real grades; 0.0 when nothing is graded."""
        valid = [g.grade_point for g in self._course_grades.values() if not g.is_sentinel]
        if not valid:
            return 0.0
        return sum(valid) / len(valid)


class Lesson:
    """A lesson of fixed duration that may be given a start time."""

    def __init__(self, name: str, length_minutes: int, lesson_type: LessonType = LessonType.LECTURE):
        self._name = require_text(name, "Lesson name")
        self._length_minutes = require_positive(length_minutes, "Lesson duration")
        self._lesson_type = lesson_type
        self._start_time: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def length_minutes(self) -> int:
        return self._length_minutes

    @property
    def lesson_type(self) -> LessonType:
        return self._lesson_type

    @property
    def start_time(self) -> Optional[datetime]:
        return self._start_time

    @property
    def end_time(self) -> Optional[datetime]:
        if self._start_time is None:
            return None
        return self._start_time + timedelta(minutes=self._length_minutes)

    @property
    def is_scheduled(self) -> bool:
        return self._start_time is not None

    def schedule(self, on: date, start_hour: int, start_minute: int) -> None:
        """Set the start time; the duration stays as constructed."""
        try:
            self._start_time = datetime.combine(on, time(start_hour, start_minute))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid lesson schedule for {self._name}: {e}")

    def __str__(self) -> str:
        return f"{self._name}-{self._length_minutes}min."

    def __repr__(self) -> str:
        return f"Lesson(name={self._name!r}, type={self._lesson_type.name}, start={self._start_time})"


class Course:
    """Course taught by exactly one professor."""

    DEFAULT_MAX_LESSONS = 50

    def __init__(self, name: str, professor: Professor, ects: int,
                 level: CourseLevel = CourseLevel.BEGINNER, max_lessons: int = DEFAULT_MAX_LESSONS):
        self._name = require_text(name, "Course name")
        if not isinstance(professor, Professor):
            raise ValidationError(f"Course {name} requires a professor")
        self._professor = professor
        self._ects = require_positive(ects, "ECTS")
        self._max_lessons = require_positive(max_lessons, "maxLessons")
        self._level = level
        self._lessons: List[Lesson] = []
        # secondary index, Student.enrolled_courses is authoritative
        self._enrolled_students: Dict[str, Student] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def professor(self) -> Professor:
        return self._professor

    @property
    def ects(self) -> int:
        return self._ects

    @property
    def level(self) -> CourseLevel:
        return self._level

    @property
    def max_lessons(self) -> int:
        return self._max_lessons

    @property
    def lessons(self) -> List[Lesson]:
        return list(self._lessons)

    @property
    def lesson_names(self) -> List[str]:
        return [lesson.name for lesson in self._lessons]

    @property
    def enrolled_students(self) -> List[Student]:
        return list(self._enrolled_students.values())

    @property
    def enrollment_count(self) -> int:
        return len(self._enrolled_students)

    @property
    def total_lesson_minutes(self) -> int:
        return sum(lesson.length_minutes for lesson in self._lessons)

    def add_lesson(self, lesson: Lesson) -> None:
        """Append a lesson; names are unique ignoring case."""
        key = lesson.name.casefold()
        if any(existing.name.casefold() == key for existing in self._lessons):
            raise DuplicateError(f"Course {self._name} already has a lesson named {lesson.name}")
        if len(self._lessons) >= self._max_lessons:
            raise LimitExceededError(
                f"Course {self._name} cannot hold more than {self._max_lessons} lessons")
        self._lessons.append(lesson)

    def get_lesson(self, name: str) -> Lesson:
        key = name.casefold()
        for lesson in self._lessons:
            if lesson.name.casefold() == key:
                return lesson
        raise NotFoundError(f"Lesson {name} not found in course {self._name}")

    def enroll_student(self, student: Student) -> bool:
        """Add a student to the index. Returns False if already present."""
        if student.username in self._enrolled_students:
            return False
        self._enrolled_students[student.username] = student
        return True

    def has_student(self, student: Student) -> bool:
        return student.username in self._enrolled_students

    def __eq__(self, other) -> bool:
        if not isinstance(other, Course):
            return NotImplemented
        return self._name == other._name and self._professor == other._professor

    def __hash__(self) -> int:
        return hash((self._name, self._professor))

    def __str__(self) -> str:
        return f"Course: {self._name} ({self._ects} ECTS, {self._level}) - {self._professor.full_name}"

    def __repr__(self) -> str:
        return f"Course(name={self._name!r}, professor={self._professor.username!r})"


@dataclass(frozen=True)
class Enrollment:
    """Immutable link between a student and a course for one semester."""
    student: Student
    course: Course
    semester: Semester
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    grade: GradeType = GradeType.NOT_GRADED
    enrollment_date: datetime = field(default_factory=datetime.now)
    completion_date: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.student, Student):
            raise ValidationError("Enrollment requires a student")
        if not isinstance(self.course, Course):
            raise ValidationError("Enrollment requires a course")
        if isinstance(self.semester, int) and not isinstance(self.semester, bool):
            object.__setattr__(self, "semester", Semester.from_number(self.semester))
        if not isinstance(self.semester, Semester):
            raise ValidationError(f"Invalid semester: {self.semester!r}")

    @classmethod
    def pending(cls, student: Student, course: Course, semester: Union[Semester, int]) -> "Enrollment":
        return cls(student, course, semester, status=EnrollmentStatus.PENDING)

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def is_completed(self) -> bool:
        return self.status == EnrollmentStatus.COMPLETED

    @property
    def is_passed(self) -> bool:
        return self.grade.is_passing

    @property
    def key(self) -> Tuple[int, str]:
        return self.student.id, self.course.name

    def with_status(self, new_status: EnrollmentStatus) -> "Enrollment":
        """Return a copy in ``new_status``; terminal statuses stamp completion."""
        completion = self.completion_date
        if new_status.is_terminal:
            completion = datetime.now()
        return replace(self, status=new_status, completion_date=completion)

    def with_grade(self, new_grade: GradeType) -> "Enrollment":
        """Return a copy carrying ``new_grade`` and the status it implies."""
        if new_grade.is_sentinel:
            return replace(self, grade=new_grade)
        if new_grade == GradeType.F:
            new_status = EnrollmentStatus.FAILED
        elif new_grade.is_passing:
            new_status = EnrollmentStatus.COMPLETED
        else:
            new_status = EnrollmentStatus.FAILED
        return replace(self.with_status(new_status), grade=new_grade)

    def __str__(self) -> str:
        return (f"{self.student.full_name} -> {self.course.name} "
                f"[{self.semester}, {self.status}, {self.grade}]")
