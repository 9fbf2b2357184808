import logging

from extensions import db
from models.role import ACADEMIC, ADMIN, TEACHER, Role
from models.user import User
from services.auth_service import hash_password

logger = logging.getLogger(__name__)


def seed_roles():
    roles = [
        {"role_id": 1, "role_name": ADMIN},
        {"role_id": 2, "role_name": ACADEMIC},
        {"role_id": 3, "role_name": TEACHER},
    ]

    for r in roles:
        existing = Role.query.filter(
            (Role.role_id == r["role_id"]) |
            (Role.role_name == r["role_name"])
        ).first()

        if not existing:
            db.session.add(
                Role(
                    role_id=r["role_id"],
                    role_name=r["role_name"]
                )
            )

    db.session.commit()
    logger.info("Roles verified (ADMIN=1, ACADEMIC=2, TEACHER=3)")


def seed_admin(username="admin", password="admin123"):
    if User.query.filter_by(username=username).first():
        return

    db.session.add(
        User(
            username=username,
            full_name="Administrator",
            password_hash=hash_password(password),
            role_id=1
        )
    )
    db.session.commit()
    logger.info("Admin user %s created", username)


def run_seed():
    seed_roles()
    seed_admin()
