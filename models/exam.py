from extensions import db


class Exam(db.Model):
    __tablename__ = "exams"

    exam_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    term = db.Column(db.String(20))

    academic_year_id = db.Column(
        db.Integer,
        db.ForeignKey("academic_years.academic_year_id"),
        nullable=False
    )

    academic_year = db.relationship("AcademicYear", lazy="joined")

    def __repr__(self):
        return f"<Exam {self.name}>"
