import uuid
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy import func, ForeignKey
from app.extensions import db

class Note(db.Model):
    __tablename__ = "notes"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(100), nullable=False)
    content = db.Column(db.Text, nullable=False)

    owner_id = db.Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner = db.relationship("User", back_populates="notes", lazy="joined")

    # pas de cascade delete : à la suppression d'une note, les images passent à note_id = NULL
    images = db.relationship("Image", back_populates="note", lazy="selectin", order_by="Image.created_at")

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class File(db.Model):
    """Blob binaire d'une image. Créé une fois par upload, jamais modifié."""
    __tablename__ = "files"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    blob = db.Column(db.LargeBinary, nullable=False)

    # supprimer le fichier supprime l'image qui le référence (FK ON DELETE CASCADE)
    image = db.relationship("Image", back_populates="file", uselist=False, cascade="all, delete-orphan")

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)


class Image(db.Model):
    __tablename__ = "images"

    # l'id public d'une image est l'id de son fichier
    file_id = db.Column(
        UUID(as_uuid=True),
        ForeignKey("files.id", ondelete="CASCADE", onupdate="CASCADE"),
        primary_key=True,
    )
    content_type = db.Column(db.String(255), nullable=False)
    alt_text = db.Column(db.Text, nullable=True)

    note_id = db.Column(
        UUID(as_uuid=True),
        ForeignKey("notes.id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
        index=True,
    )

    file = db.relationship("File", back_populates="image")
    note = db.relationship("Note", back_populates="images")

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
