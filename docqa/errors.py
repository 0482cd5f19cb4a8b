# docqa/errors.py
from __future__ import annotations


class DocQAError(Exception):
    """
    Basis aller fachlichen Fehler.
    status_code/error_type steuern die HTTP-Antwort in api.py.
    """
    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------- Client ----------
class ClientInputError(DocQAError):
    status_code = 400
    error_type = "invalid_input"


class InvalidInputError(ClientInputError):
    """Leeres Dokument oder leere Frage beim Prompt-Bau."""


class QuestionRequiredError(ClientInputError):
    def __init__(self, message: str = "Question is required") -> None:
        super().__init__(message)


# ---------- Vorbedingungen ----------
class PreconditionError(DocQAError):
    status_code = 400
    error_type = "no_document"


class NoDocumentError(PreconditionError):
    def __init__(self, message: str = "No base text uploaded") -> None:
        super().__init__(message)


# ---------- Delegate-Modell ----------
class ProviderError(DocQAError):
    """Jeder Fehler des LLM-Backends (Netz, Auth, Provider, kaputter Stream)."""
    status_code = 502
    error_type = "provider_error"


class MalformedStreamError(Exception):
    """Stream-Zeile ließ sich nicht parsen. Wird in core.py zu ProviderError."""
