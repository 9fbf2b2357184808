from types import SimpleNamespace

import pytest

from app import create_app
from config.config import TestConfig
from extensions import db
from models import (
    AcademicYear, Class, ClassSubject, CombinationItem, Exam, SelectionItem,
    Student, StudentSubjectSelection, Subject, SubjectCombination,
    TeacherSubjectAssignment, User
)
from services.auth_service import hash_password
from utils.seed_data import seed_roles

PASSWORD = "secret123"

O_LEVEL_CORE = [
    ("MATH", "Mathematics"),
    ("ENG", "English"),
    ("KIS", "Kiswahili"),
    ("BIO", "Biology"),
    ("CHEM", "Chemistry"),
    ("PHY", "Physics"),
    ("GEO", "Geography"),
]
O_LEVEL_OPTIONAL = [
    ("COMP", "Computer Studies"),
    ("LIT", "Literature"),
]
A_LEVEL_SUBJECTS = [
    ("APHY", "Advanced Physics"),
    ("ACHEM", "Advanced Chemistry"),
    ("AMATH", "Advanced Mathematics"),
    ("GS", "General Studies"),
    ("AHIST", "Advanced History"),
]


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        seed_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(username, role_id):
    user = User(
        username=username,
        full_name=username.title(),
        password_hash=hash_password(PASSWORD),
        role_id=role_id
    )
    db.session.add(user)
    return user


def _subject(code, name, subject_type, level):
    subject = Subject(
        subject_code=code,
        subject_name=name,
        subject_type=subject_type,
        education_level=level
    )
    db.session.add(subject)
    return subject


@pytest.fixture
def school(app):
    """Reference data for one O-Level class and one A-Level class."""
    admin = _user("admin", 1)
    academic = _user("academic", 2)
    teacher = _user("teacher", 3)
    other_teacher = _user("other", 3)

    year = AcademicYear(name="2026", is_current=True)
    db.session.add(year)
    db.session.flush()

    exam = Exam(name="Midterm", term="Term 1", academic_year_id=year.academic_year_id)
    db.session.add(exam)

    core = [_subject(code, name, "CORE", "O_LEVEL") for code, name in O_LEVEL_CORE]
    optional = [_subject(code, name, "OPTIONAL", "O_LEVEL") for code, name in O_LEVEL_OPTIONAL]
    a_level = {code: _subject(code, name, "CORE", "A_LEVEL") for code, name in A_LEVEL_SUBJECTS}
    db.session.flush()

    form_two = Class(
        class_name="Form 2",
        education_level="O_LEVEL",
        academic_year_id=year.academic_year_id
    )
    form_five = Class(
        class_name="Form 5",
        education_level="A_LEVEL",
        academic_year_id=year.academic_year_id
    )
    db.session.add_all([form_two, form_five])
    db.session.flush()

    form_two.class_subjects = [ClassSubject(subject_id=s.subject_id) for s in core + optional]
    form_five.class_subjects = [ClassSubject(subject_id=s.subject_id) for s in a_level.values()]

    pcm = SubjectCombination(code="PCM", name="Physics, Chemistry, Mathematics")
    pcm.items = [
        CombinationItem(subject_id=a_level["APHY"].subject_id, is_principal=True),
        CombinationItem(subject_id=a_level["ACHEM"].subject_id, is_principal=True),
        CombinationItem(subject_id=a_level["AMATH"].subject_id, is_principal=True),
        CombinationItem(subject_id=a_level["GS"].subject_id, is_subsidiary=True),
    ]
    db.session.add(pcm)
    db.session.flush()

    o_students = [
        Student(admission_no=f"O00{i}", first_name=first, last_name="Student",
                education_level="O_LEVEL", class_id=form_two.class_id)
        for i, first in enumerate(["Amina", "Baraka", "Chausiku"], start=1)
    ]
    a_students = [
        Student(admission_no="A001", first_name="Daudi", last_name="Student",
                education_level="A_LEVEL", class_id=form_five.class_id,
                subject_combination_id=pcm.combination_id),
        Student(admission_no="A002", first_name="Eliya", last_name="Student",
                education_level="A_LEVEL", class_id=form_five.class_id),
    ]
    db.session.add_all(o_students + a_students)

    # The teacher marks Mathematics in Form 2 and nothing else
    db.session.add(TeacherSubjectAssignment(
        teacher_id=teacher.user_id,
        subject_id=core[0].subject_id,
        class_id=form_two.class_id
    ))
    db.session.commit()

    return SimpleNamespace(
        admin=admin,
        academic=academic,
        teacher=teacher,
        other_teacher=other_teacher,
        year=year,
        exam=exam,
        core=core,
        optional=optional,
        a_level=a_level,
        o_class=form_two,
        a_class=form_five,
        combination=pcm,
        o_students=o_students,
        a_students=a_students,
    )


@pytest.fixture
def select_optional(school):
    """Record an O-Level selection of ``subjects`` for ``student``."""

    def _select(student, subjects):
        selection = StudentSubjectSelection(
            student_id=student.student_id,
            academic_year_id=school.year.academic_year_id,
            approved_by=school.academic.user_id
        )
        selection.items = [
            SelectionItem(subject_id=s.subject_id, selection_type="OPTIONAL") for s in subjects
        ]
        db.session.add(selection)
        db.session.commit()
        return selection

    return _select


@pytest.fixture
def login(client, school):
    def _login(user):
        response = client.post("/login", json={"username": user.username, "password": PASSWORD})
        assert response.status_code == 200
        return response

    return _login
