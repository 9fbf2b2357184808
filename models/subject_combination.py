from extensions import db


class SubjectCombination(db.Model):
    __tablename__ = "subject_combinations"

    combination_id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(10), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)

    items = db.relationship(
        "CombinationItem",
        backref="combination",
        lazy="selectin",
        cascade="all, delete-orphan"
    )

    def item_for(self, subject_id):
        for item in self.items:
            if item.subject_id == subject_id:
                return item
        return None

    def __repr__(self):
        return f"<SubjectCombination {self.code}>"


class CombinationItem(db.Model):
    __tablename__ = "combination_items"

    item_id = db.Column(db.Integer, primary_key=True)

    combination_id = db.Column(
        db.Integer,
        db.ForeignKey("subject_combinations.combination_id"),
        nullable=False
    )

    subject_id = db.Column(
        db.Integer,
        db.ForeignKey("subjects.subject_id"),
        nullable=False
    )

    is_principal = db.Column(db.Boolean, nullable=False, default=False)
    is_subsidiary = db.Column(db.Boolean, nullable=False, default=False)

    subject = db.relationship("Subject", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("combination_id", "subject_id", name="unique_combination_subject"),
        db.CheckConstraint(
            "NOT (is_principal AND is_subsidiary)",
            name="ck_principal_xor_subsidiary"
        ),
    )

    def __repr__(self):
        return f"<CombinationItem combination={self.combination_id} subject={self.subject_id}>"
