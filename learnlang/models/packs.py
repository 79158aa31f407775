from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Language(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str = Field(..., description="Code court, ex: \"hi\" pour le hindi")


class Pack(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = Field(..., description="Unique par utilisateur et par langue")
    lang_id: str
    user_id: str
    public: bool = False


class Vocab(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    image: str = Field(..., description="Référence publique, ex: /files/images/knife.png")
    name: str
    translation: Optional[str] = None
    pack_id: str


class PackDetail(BaseModel):
    pack: Pack
    vocabs: List[Vocab]
