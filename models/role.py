from extensions import db

ADMIN = "ADMIN"
ACADEMIC = "ACADEMIC"
TEACHER = "TEACHER"


class Role(db.Model):
    __tablename__ = "roles"

    role_id = db.Column(db.Integer, primary_key=True)
    role_name = db.Column(db.String(20), unique=True, nullable=False)

    users = db.relationship("User", backref="role", lazy=True)

    def __repr__(self):
        return f"<Role {self.role_name}>"
