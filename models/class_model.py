from extensions import db


class ClassSubject(db.Model):
    __tablename__ = "class_subjects"

    class_id = db.Column(
        db.Integer,
        db.ForeignKey("classes.class_id"),
        primary_key=True
    )
    subject_id = db.Column(
        db.Integer,
        db.ForeignKey("subjects.subject_id"),
        primary_key=True
    )

    subject = db.relationship("Subject", lazy="joined")


class Class(db.Model):
    __tablename__ = "classes"

    class_id = db.Column(db.Integer, primary_key=True)
    class_name = db.Column(db.String(50), nullable=False)
    education_level = db.Column(db.String(20), nullable=False)

    academic_year_id = db.Column(
        db.Integer,
        db.ForeignKey("academic_years.academic_year_id"),
        nullable=True
    )

    # Designated class teacher may act on every subject of the class
    class_teacher_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=True
    )

    academic_year = db.relationship("AcademicYear", lazy="joined")
    class_teacher = db.relationship("User", lazy=True)
    students = db.relationship("Student", backref="class_", lazy=True)
    class_subjects = db.relationship(
        "ClassSubject",
        lazy=True,
        cascade="all, delete-orphan"
    )

    @property
    def subjects(self):
        return [cs.subject for cs in self.class_subjects]

    def __repr__(self):
        return f"<Class {self.class_name}>"
