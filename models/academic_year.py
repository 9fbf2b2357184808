from extensions import db


class AcademicYear(db.Model):
    __tablename__ = "academic_years"

    academic_year_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(20), unique=True, nullable=False)
    is_current = db.Column(db.Boolean, default=False)

    def __repr__(self):
        return f"<AcademicYear {self.name}>"
