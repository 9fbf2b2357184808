from extensions import db
from models.enums import SubjectType
from utils.db import utcnow


class StudentSubjectSelection(db.Model):
    __tablename__ = "student_subject_selections"

    selection_id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("students.student_id"),
        nullable=False
    )

    academic_year_id = db.Column(
        db.Integer,
        db.ForeignKey("academic_years.academic_year_id"),
        nullable=False
    )

    approved_by = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=True
    )

    status = db.Column(db.String(20), default="APPROVED")
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    items = db.relationship(
        "SelectionItem",
        backref="selection",
        lazy="selectin",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.UniqueConstraint("student_id", "academic_year_id", name="unique_student_year_selection"),
    )

    @property
    def core_subject_ids(self):
        return [i.subject_id for i in self.items if i.selection_type == SubjectType.CORE.value]

    @property
    def optional_subject_ids(self):
        return [i.subject_id for i in self.items if i.selection_type == SubjectType.OPTIONAL.value]

    def to_dict(self):
        return {
            "selection_id": self.selection_id,
            "student_id": self.student_id,
            "academic_year_id": self.academic_year_id,
            "approved_by": self.approved_by,
            "status": self.status,
            "notes": self.notes,
            "core_subjects": self.core_subject_ids,
            "optional_subjects": self.optional_subject_ids,
        }

    def __repr__(self):
        return f"<StudentSubjectSelection student={self.student_id} year={self.academic_year_id}>"


class SelectionItem(db.Model):
    __tablename__ = "selection_items"

    item_id = db.Column(db.Integer, primary_key=True)

    selection_id = db.Column(
        db.Integer,
        db.ForeignKey("student_subject_selections.selection_id"),
        nullable=False
    )

    subject_id = db.Column(
        db.Integer,
        db.ForeignKey("subjects.subject_id"),
        nullable=False
    )

    selection_type = db.Column(db.String(10), nullable=False)  # CORE | OPTIONAL

    __table_args__ = (
        db.UniqueConstraint("selection_id", "subject_id", name="unique_selection_subject"),
    )
