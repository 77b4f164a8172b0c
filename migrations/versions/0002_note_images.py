"""Attach images to notes and cascade file deletes

Rebuilds the images foreign keys:
  file_id -> files.id  ON DELETE CASCADE  ON UPDATE CASCADE
  note_id -> notes.id  ON DELETE SET NULL ON UPDATE CASCADE

Revision ID: 0002_note_images
Revises: 0001_initial_schema
Create Date: 2023-07-11 04:26:06.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0002_note_images"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade():
    # batch : sur SQLite la table est recréée puis les lignes recopiées
    with op.batch_alter_table("images", recreate="auto") as batch_op:
        batch_op.add_column(sa.Column("note_id", postgresql.UUID(as_uuid=True), nullable=True))
        batch_op.drop_constraint("images_file_id_fkey", type_="foreignkey")
        batch_op.create_foreign_key(
            "images_file_id_fkey", "files", ["file_id"], ["id"],
            ondelete="CASCADE", onupdate="CASCADE",
        )
        batch_op.create_foreign_key(
            "images_note_id_fkey", "notes", ["note_id"], ["id"],
            ondelete="SET NULL", onupdate="CASCADE",
        )
        batch_op.create_index("ix_images_note_id", ["note_id"], unique=False)


def downgrade():
    with op.batch_alter_table("images", recreate="auto") as batch_op:
        batch_op.drop_index("ix_images_note_id")
        batch_op.drop_constraint("images_note_id_fkey", type_="foreignkey")
        batch_op.drop_constraint("images_file_id_fkey", type_="foreignkey")
        batch_op.create_foreign_key("images_file_id_fkey", "files", ["file_id"], ["id"])
        batch_op.drop_column("note_id")
