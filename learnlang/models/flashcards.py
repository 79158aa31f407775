from pydantic import BaseModel, Field


class Flashcard(BaseModel):
    """Vue simplifiée d'un vocab pour le jeu (la traduction reste cachée)."""

    id: str
    image: str
    name: str = Field(..., description="Terme à deviner")
    pack_name: str = ""
