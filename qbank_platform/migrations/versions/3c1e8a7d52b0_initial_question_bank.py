"""initial question bank tables"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3c1e8a7d52b0"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("username", sa.String(length=64), nullable=False),
            sa.Column("name", sa.String(length=128), nullable=False),
            sa.Column("password_hash", sa.String(length=255), nullable=False),
            sa.Column("role", sa.String(length=32), nullable=False, server_default="user"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        )
        op.create_index("ix_users_username", "users", ["username"], unique=True)

    if "question_files" not in tables:
        op.create_table(
            "question_files",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("original_filename", sa.String(length=255), nullable=False),
            sa.Column("display_name", sa.String(length=255), nullable=True),
            sa.Column("storage_file_id", sa.String(length=36), nullable=True),
            sa.Column("total_questions", sa.Integer, nullable=False, server_default="0"),
            sa.Column("uploaded_by", sa.String(length=64), nullable=True),
            sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        )
        op.create_index("ix_question_files_uploaded_at", "question_files", ["uploaded_at"])

    if "questions" not in tables:
        op.create_table(
            "questions",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column(
                "file_id",
                sa.String(length=36),
                sa.ForeignKey("question_files.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("question_text", sa.Text, nullable=False),
            sa.Column("option1", sa.Text, nullable=False, server_default=""),
            sa.Column("option2", sa.Text, nullable=False, server_default=""),
            sa.Column("option3", sa.Text, nullable=False, server_default=""),
            sa.Column("option4", sa.Text, nullable=False, server_default=""),
            sa.Column("option5", sa.Text, nullable=False, server_default=""),
            sa.Column("answer", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("explanation", sa.Text, nullable=False, server_default=""),
            sa.Column("question_image_id", sa.String(length=36), nullable=True),
            sa.Column("explanation_image_id", sa.String(length=36), nullable=True),
            sa.Column("type", sa.Integer, nullable=False, server_default="0"),
            sa.Column("section", sa.String(length=32), nullable=False, server_default="0"),
            sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        )
        op.create_index("ix_questions_file_id", "questions", ["file_id"])
        op.create_index("ix_questions_section", "questions", ["section"])
        op.create_index("ix_questions_file_order", "questions", ["file_id", "order_index"])


def downgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())
    for table in ("questions", "question_files", "users"):
        if table in tables:
            op.drop_table(table)
