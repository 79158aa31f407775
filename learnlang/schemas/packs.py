from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# -------------------
# Enveloppes
# -------------------
class DataOut(BaseModel, Generic[T]):
    data: T
    meta: Optional[dict[str, Any]] = None


class ErrorOut(BaseModel):
    error: str
    code: str
    request_id: Optional[str] = None


# -------------------
# Packs
# -------------------
class PackCreateIn(BaseModel):
    # pas de champ id : il est attribué par le serveur
    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="", max_length=255)
    lang_id: str = Field(default="", max_length=32)
    user_id: str = Field(default="", max_length=255)
    public: bool = False
