from typing import Optional

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_409_CONFLICT,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

# Codes renvoyés dans le champ "code" des réponses d'erreur
CODE_MISSING_FIELDS = "MISSING_FIELDS"
CODE_INVALID_INPUT = "INVALID_INPUT"
CODE_EMPTY_BODY = "EMPTY_BODY"
CODE_JSON_SYNTAX = "JSON_SYNTAX"
CODE_JSON_TYPE = "JSON_TYPE"
CODE_UNKNOWN_FIELD = "UNKNOWN_FIELD"
CODE_INVALID_LANGUAGE = "INVALID_LANGUAGE"
CODE_INVALID_PACK = "INVALID_PACK"
CODE_INVALID_PACKS = "INVALID_PACKS"
CODE_DUPLICATE_PACK = "DUPLICATE_PACK"
CODE_DUPLICATE_VOCAB = "DUPLICATE_VOCAB"
CODE_INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
CODE_FILE_TOO_LARGE = "FILE_TOO_LARGE"
CODE_STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
CODE_INTERNAL = "INTERNAL"


class LearnLangError(Exception):
    """
    Erreur métier de base.

    Le cœur (clés, stockage, entités) lève ces erreurs ; la couche HTTP se
    contente de les traduire en réponse JSON via `status_code` et `code`.
    """

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR
    code: str = CODE_INTERNAL
    retryable: bool = False

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(LearnLangError):
    status_code = HTTP_400_BAD_REQUEST
    code = CODE_INVALID_INPUT


class MissingFields(InvalidInput):
    code = CODE_MISSING_FIELDS

    def __init__(self, fields: list[str], what: str = "field"):
        self.fields = list(fields)
        super().__init__(f"missing required {what}(s): {', '.join(self.fields)}")


class UnknownLanguage(LearnLangError):
    status_code = HTTP_400_BAD_REQUEST
    code = CODE_INVALID_LANGUAGE


class UnknownPack(LearnLangError):
    status_code = HTTP_400_BAD_REQUEST
    code = CODE_INVALID_PACK


class DuplicateKey(LearnLangError):
    status_code = HTTP_409_CONFLICT
    code = CODE_DUPLICATE_PACK


class UnsupportedContentType(LearnLangError):
    status_code = HTTP_400_BAD_REQUEST
    code = CODE_INVALID_FILE_TYPE


class ContentTooLarge(LearnLangError):
    status_code = HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = CODE_FILE_TOO_LARGE


class StorageUnavailable(LearnLangError):
    status_code = HTTP_503_SERVICE_UNAVAILABLE
    code = CODE_STORAGE_UNAVAILABLE
    retryable = True


class Internal(LearnLangError):
    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    code = CODE_INTERNAL
