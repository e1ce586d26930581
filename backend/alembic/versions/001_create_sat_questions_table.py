"""Create sat_questions table

Revision ID: 001
Revises: 
Create Date: 2026-10-17 10:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sat_questions",
        sa.Column("question_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("test_id", sa.Integer(), nullable=True),
        sa.Column("section", sa.String(64), nullable=True),
        sa.Column("question_text", sa.Text(), nullable=True),
        sa.Column("hint", sa.Text(), nullable=True),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_index("ix_sat_questions_test_id", "sat_questions", ["test_id"])
    op.create_index("ix_sat_questions_section_test_id", "sat_questions", ["section", "test_id"])


def downgrade() -> None:
    op.drop_index("ix_sat_questions_section_test_id", table_name="sat_questions")
    op.drop_index("ix_sat_questions_test_id", table_name="sat_questions")
    op.drop_table("sat_questions")
