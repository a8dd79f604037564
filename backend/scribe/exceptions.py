"""
Exceções de domínio levantadas pelos serviços e traduzidas pelas views.
"""


class ScribeError(Exception):
    """Erro de regra de negócio com código e status HTTP sugerido."""

    error_code = "BAD_REQUEST"
    status_code = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict:
        return {"error": self.message, "error_code": self.error_code, **self.details}


class InsufficientCreditsError(ScribeError):
    error_code = "INSUFFICIENT_CREDITS"
    status_code = 402

    def __init__(self, credits_needed: int, credits_available: int):
        super().__init__(
            f"You need {credits_needed} credits, but only have {credits_available}.",
            credits_needed=credits_needed,
            credits_available=credits_available,
            user_action="Request or purchase credits to continue.",
        )


class InvalidTransitionError(ScribeError):
    error_code = "INVALID_TRANSITION"
    status_code = 409


class CreditAllocationError(ScribeError):
    error_code = "INVALID_ALLOCATION"
    status_code = 400


class PermissionDeniedError(ScribeError):
    error_code = "FORBIDDEN"
    status_code = 403


class TranscriptionUnavailableError(ScribeError):
    error_code = "TRANSCRIPTION_UNAVAILABLE"
    status_code = 503
