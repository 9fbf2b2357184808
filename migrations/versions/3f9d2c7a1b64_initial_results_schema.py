"""initial results schema

Revision ID: 3f9d2c7a1b64
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9d2c7a1b64"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "roles",
        sa.Column("role_id", sa.Integer(), primary_key=True),
        sa.Column("role_name", sa.String(length=20), nullable=False, unique=True),
    )
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=120), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["role_id"], ["roles.role_id"]),
    )
    op.create_table(
        "academic_years",
        sa.Column("academic_year_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=20), nullable=False, unique=True),
        sa.Column("is_current", sa.Boolean(), nullable=True, server_default=sa.text("0")),
    )
    op.create_table(
        "subjects",
        sa.Column("subject_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("subject_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("subject_name", sa.String(length=100), nullable=False),
        sa.Column("subject_type", sa.String(length=10), nullable=False, server_default="CORE"),
        sa.Column("education_level", sa.String(length=20), nullable=False, server_default="BOTH"),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )
    op.create_table(
        "subject_combinations",
        sa.Column("combination_id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=10), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=False),
    )
    op.create_table(
        "combination_items",
        sa.Column("item_id", sa.Integer(), primary_key=True),
        sa.Column("combination_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("is_principal", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_subsidiary", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["combination_id"], ["subject_combinations.combination_id"]),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.subject_id"]),
        sa.UniqueConstraint("combination_id", "subject_id", name="unique_combination_subject"),
        sa.CheckConstraint("NOT (is_principal AND is_subsidiary)", name="ck_principal_xor_subsidiary"),
    )
    op.create_table(
        "classes",
        sa.Column("class_id", sa.Integer(), primary_key=True),
        sa.Column("class_name", sa.String(length=50), nullable=False),
        sa.Column("education_level", sa.String(length=20), nullable=False),
        sa.Column("academic_year_id", sa.Integer(), nullable=True),
        sa.Column("class_teacher_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["academic_year_id"], ["academic_years.academic_year_id"]),
        sa.ForeignKeyConstraint(["class_teacher_id"], ["users.user_id"]),
    )
    op.create_table(
        "class_subjects",
        sa.Column("class_id", sa.Integer(), primary_key=True),
        sa.Column("subject_id", sa.Integer(), primary_key=True),
        sa.ForeignKeyConstraint(["class_id"], ["classes.class_id"]),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.subject_id"]),
    )
    op.create_table(
        "students",
        sa.Column("student_id", sa.Integer(), primary_key=True),
        sa.Column("admission_no", sa.String(length=20), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=60), nullable=False),
        sa.Column("last_name", sa.String(length=60), nullable=False),
        sa.Column("education_level", sa.String(length=20), nullable=False),
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("subject_combination_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["class_id"], ["classes.class_id"]),
        sa.ForeignKeyConstraint(["subject_combination_id"], ["subject_combinations.combination_id"]),
    )
    op.create_table(
        "student_subject_selections",
        sa.Column("selection_id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("academic_year_id", sa.Integer(), nullable=False),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=True, server_default="APPROVED"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.student_id"]),
        sa.ForeignKeyConstraint(["academic_year_id"], ["academic_years.academic_year_id"]),
        sa.ForeignKeyConstraint(["approved_by"], ["users.user_id"]),
        sa.UniqueConstraint("student_id", "academic_year_id", name="unique_student_year_selection"),
    )
    op.create_table(
        "selection_items",
        sa.Column("item_id", sa.Integer(), primary_key=True),
        sa.Column("selection_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("selection_type", sa.String(length=10), nullable=False),
        sa.ForeignKeyConstraint(["selection_id"], ["student_subject_selections.selection_id"]),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.subject_id"]),
        sa.UniqueConstraint("selection_id", "subject_id", name="unique_selection_subject"),
    )
    op.create_table(
        "exams",
        sa.Column("exam_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("term", sa.String(length=20), nullable=True),
        sa.Column("academic_year_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["academic_year_id"], ["academic_years.academic_year_id"]),
    )
    op.create_table(
        "results",
        sa.Column("result_id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("exam_id", sa.Integer(), nullable=False),
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("academic_year_id", sa.Integer(), nullable=False),
        sa.Column("marks_obtained", sa.Float(), nullable=False),
        sa.Column("grade", sa.String(length=2), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("education_level", sa.String(length=20), nullable=False),
        sa.Column("is_principal", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_subsidiary", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("comment", sa.String(length=255), nullable=True),
        sa.Column("entered_by", sa.Integer(), nullable=False),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.student_id"]),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.subject_id"]),
        sa.ForeignKeyConstraint(["exam_id"], ["exams.exam_id"]),
        sa.ForeignKeyConstraint(["class_id"], ["classes.class_id"]),
        sa.ForeignKeyConstraint(["academic_year_id"], ["academic_years.academic_year_id"]),
        sa.ForeignKeyConstraint(["entered_by"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["updated_by"], ["users.user_id"]),
        sa.UniqueConstraint("student_id", "subject_id", "exam_id", name="unique_student_subject_exam"),
        sa.CheckConstraint("marks_obtained >= 0 AND marks_obtained <= 100", name="ck_marks_range"),
    )
    op.create_table(
        "teacher_subject_assignments",
        sa.Column("assignment_id", sa.Integer(), primary_key=True),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="active"),
        sa.Column("assigned_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.subject_id"]),
        sa.ForeignKeyConstraint(["class_id"], ["classes.class_id"]),
        sa.UniqueConstraint("teacher_id", "subject_id", "class_id", name="unique_teacher_subject_class"),
    )


def downgrade():
    op.drop_table("teacher_subject_assignments")
    op.drop_table("results")
    op.drop_table("exams")
    op.drop_table("selection_items")
    op.drop_table("student_subject_selections")
    op.drop_table("students")
    op.drop_table("class_subjects")
    op.drop_table("classes")
    op.drop_table("combination_items")
    op.drop_table("subject_combinations")
    op.drop_table("subjects")
    op.drop_table("academic_years")
    op.drop_table("users")
    op.drop_table("roles")
