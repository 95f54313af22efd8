"""
Flat, identifier-keyed records as they appear in the JSON data files.

Records reference each other by professor ID, student ID and course name;
enum values and timestamps are kept as strings and decoded by ``codec``.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FlatRecord(BaseModel):
    """Base record: camelCase keys on disk, snake_case attributes in code."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_json_dict(self) -> Dict:
        return self.model_dump(mode="json", by_alias=True)


class ProfessorRecord(FlatRecord):
    id: int
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: Optional[str] = ""
    email: Optional[str] = ""
    max_courses: int
    teaching_courses: Optional[List[str]] = None


class StudentRecord(FlatRecord):
    id: int
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: Optional[str] = ""
    email: Optional[str] = ""
    max_courses: int
    enrolled_courses: Optional[List[str]] = None
    course_grades: Optional[Dict[str, str]] = None


class CourseRecord(FlatRecord):
    name: str = Field(..., min_length=1)
    professor_id: int
    max_lessons: int
    ects: int
    level: str
    lesson_names: Optional[List[str]] = None


class LessonRecord(FlatRecord):
    name: str = Field(..., min_length=1)
    course_name: str
    length_minutes: int
    type: str
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None


class EnrollmentRecord(FlatRecord):
    student_id: int
    course_name: str
    semester: str
    status: str
    grade: str
    enrollment_date: str
    completion_date: Optional[str] = None
