from .role import Role
from .user import User
from .academic_year import AcademicYear
from .subjects import Subject
from .class_model import Class, ClassSubject
from .subject_combination import SubjectCombination, CombinationItem
from .student import Student
from .subject_selection import StudentSubjectSelection, SelectionItem
from .exam import Exam
from .result import Result
from .teacher_subject_assignment import TeacherSubjectAssignment
__all__ = [
    "Role", "User", "AcademicYear", "Subject", "Class", "ClassSubject",
    "SubjectCombination", "CombinationItem", "Student", "StudentSubjectSelection",
    "SelectionItem", "Exam", "Result", "TeacherSubjectAssignment",
]
