from extensions import db
from models.enums import SubjectLevel, SubjectType
from utils.db import utcnow


class Subject(db.Model):
    __tablename__ = "subjects"

    subject_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    subject_code = db.Column(db.String(20), nullable=False, unique=True)
    subject_name = db.Column(db.String(100), nullable=False)
    subject_type = db.Column(db.String(10), nullable=False, default=SubjectType.CORE.value)
    education_level = db.Column(db.String(20), nullable=False, default=SubjectLevel.BOTH.value)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    @property
    def is_core(self):
        return self.subject_type == SubjectType.CORE.value

    def __repr__(self):
        return f"<Subject {self.subject_code}>"
