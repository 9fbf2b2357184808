from extensions import db
from utils.db import utcnow


class Result(db.Model):
    __tablename__ = "results"

    result_id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("students.student_id"),
        nullable=False
    )

    subject_id = db.Column(
        db.Integer,
        db.ForeignKey("subjects.subject_id"),
        nullable=False
    )

    exam_id = db.Column(
        db.Integer,
        db.ForeignKey("exams.exam_id"),
        nullable=False
    )

    class_id = db.Column(
        db.Integer,
        db.ForeignKey("classes.class_id"),
        nullable=False
    )

    academic_year_id = db.Column(
        db.Integer,
        db.ForeignKey("academic_years.academic_year_id"),
        nullable=False
    )

    marks_obtained = db.Column(db.Float, nullable=False)

    # Derived from marks_obtained on every write
    grade = db.Column(db.String(2), nullable=False)
    points = db.Column(db.Integer, nullable=False)

    education_level = db.Column(db.String(20), nullable=False)
    is_principal = db.Column(db.Boolean, nullable=False, default=False)
    is_subsidiary = db.Column(db.Boolean, nullable=False, default=False)
    comment = db.Column(db.String(255))

    entered_by = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )
    updated_by = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=True
    )

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    subject = db.relationship("Subject", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("student_id", "subject_id", "exam_id", name="unique_student_subject_exam"),
        db.CheckConstraint(
            "marks_obtained >= 0 AND marks_obtained <= 100",
            name="ck_marks_range"
        ),
    )

    def to_dict(self):
        return {
            "result_id": self.result_id,
            "student_id": self.student_id,
            "subject_id": self.subject_id,
            "exam_id": self.exam_id,
            "class_id": self.class_id,
            "academic_year_id": self.academic_year_id,
            "marks_obtained": self.marks_obtained,
            "grade": self.grade,
            "points": self.points,
            "education_level": self.education_level,
            "is_principal": self.is_principal,
            "is_subsidiary": self.is_subsidiary,
            "comment": self.comment,
            "entered_by": self.entered_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Result student={self.student_id} subject={self.subject_id} exam={self.exam_id}>"
