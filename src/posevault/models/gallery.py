from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table, Text, Uuid
from sqlalchemy.orm import mapped_column, relationship

from posevault.models.db import Base, TZDateTime, utcnow

image_tags = Table(
    "image_tags",
    Base.metadata,
    Column("image_uid", Integer, ForeignKey("images.uid", ondelete="CASCADE"), primary_key=True),
    Column("tag_uid", Integer, ForeignKey("tags.uid", ondelete="CASCADE"), primary_key=True),
)


class Gallery(Base):
    """A user's category of pose references."""

    __tablename__ = "galleries"

    uid = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id = mapped_column(Uuid, nullable=False, index=True)
    name = mapped_column(String(255), nullable=False, default="")
    notes = mapped_column(Text, nullable=False, default="")
    cover_image_uid = mapped_column(Integer, nullable=True)
    created_at = mapped_column(TZDateTime, default=utcnow, nullable=False)
    deleted_at = mapped_column(TZDateTime, nullable=True)

    images = relationship("Image", back_populates="gallery", passive_deletes=True)
    shares = relationship("SharedGallery", back_populates="gallery", passive_deletes=True)


class Tag(Base):
    __tablename__ = "tags"

    uid = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id = mapped_column(Uuid, nullable=False, index=True)
    name = mapped_column(String(100), nullable=False)


class Image(Base):
    __tablename__ = "images"

    uid = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id = mapped_column(Uuid, nullable=False, index=True)
    category_uid = mapped_column(Integer, ForeignKey("galleries.uid", ondelete="CASCADE"), nullable=False, index=True)
    name = mapped_column(String(255), nullable=False, default="")
    notes = mapped_column(Text, nullable=False, default="")
    # Object-store key, always users/<owner_id>/...
    storage_key = mapped_column(String(1024), nullable=False)
    favorite = mapped_column(Boolean, nullable=False, default=False)
    cover_image = mapped_column(Boolean, nullable=False, default=False)
    created_at = mapped_column(TZDateTime, default=utcnow, nullable=False)
    deleted_at = mapped_column(TZDateTime, nullable=True)

    gallery = relationship(Gallery, back_populates="images")
    tags = relationship(Tag, secondary=image_tags, lazy="selectin")

    @property
    def tag_names(self) -> list[str]:
        return sorted({tag.name for tag in self.tags})
