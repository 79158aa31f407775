from __future__ import annotations

import uuid

from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    Index,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from learnlang.db.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Language(Base):
    __tablename__ = "languages"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    code: Mapped[str] = mapped_column(String(16), nullable=False)  # ex: "hi"


class Pack(Base):
    __tablename__ = "packs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    lang_id: Mapped[str] = mapped_column(ForeignKey("languages.id"), index=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Vocab(Base):
    __tablename__ = "vocabs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    image: Mapped[str] = mapped_column(String(1024), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # colonne absente des anciens schémas : voir SchemaCapabilities
    translation: Mapped[str | None] = mapped_column(Text, nullable=True)
    pack_id: Mapped[str] = mapped_column(
        ForeignKey("packs.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )


# Index d'unicité insensibles à la casse : source de vérité pour les doublons
Index(
    "uq_packs_owner_lang_name",
    func.lower(Pack.user_id),
    func.lower(Pack.lang_id),
    func.lower(Pack.name),
    unique=True,
)
Index("uq_vocabs_pack_name", Vocab.pack_id, func.lower(Vocab.name), unique=True)
