from extensions import db


class Student(db.Model):
    __tablename__ = "students"

    student_id = db.Column(db.Integer, primary_key=True)
    admission_no = db.Column(db.String(20), unique=True, nullable=False)
    first_name = db.Column(db.String(60), nullable=False)
    last_name = db.Column(db.String(60), nullable=False)

    # Stored as text so that unknown levels surface as configuration errors
    education_level = db.Column(db.String(20), nullable=False)

    class_id = db.Column(
        db.Integer,
        db.ForeignKey("classes.class_id"),
        nullable=False
    )

    # A-Level only
    subject_combination_id = db.Column(
        db.Integer,
        db.ForeignKey("subject_combinations.combination_id"),
        nullable=True
    )

    is_active = db.Column(db.Boolean, default=True)

    subject_combination = db.relationship("SubjectCombination", lazy=True)
    results = db.relationship("Result", backref="student", lazy=True)
    subject_selections = db.relationship("StudentSubjectSelection", backref="student", lazy=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Student {self.admission_no}>"
