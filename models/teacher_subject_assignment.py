from extensions import db
from models.enums import AssignmentStatus


class TeacherSubjectAssignment(db.Model):
    __tablename__ = "teacher_subject_assignments"

    assignment_id = db.Column(db.Integer, primary_key=True)

    teacher_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )

    subject_id = db.Column(
        db.Integer,
        db.ForeignKey("subjects.subject_id"),
        nullable=False
    )

    class_id = db.Column(
        db.Integer,
        db.ForeignKey("classes.class_id"),
        nullable=False
    )

    status = db.Column(db.String(10), nullable=False, default=AssignmentStatus.ACTIVE.value)
    assigned_at = db.Column(db.DateTime, server_default=db.func.now())

    subject = db.relationship("Subject", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("teacher_id", "subject_id", "class_id", name="unique_teacher_subject_class"),
    )

    def __repr__(self):
        return f"<TeacherSubjectAssignment teacher={self.teacher_id} subject={self.subject_id}>"
