"""
Validadores para uploads de áudio.
"""

from django.conf import settings


class AudioUploadValidator:
    """Valida arquivos enviados para transcrição."""

    ALLOWED_PREFIXES = ("audio/", "video/")

    @classmethod
    def max_size_mb(cls) -> int:
        return int(getattr(settings, "MAX_UPLOAD_MB", 500))

    @classmethod
    def validate_file(cls, file) -> dict:
        """
        Valida tipo e tamanho do arquivo.

        Returns:
            Dict com resultado da validação: {valid: bool, errors: list}
        """
        errors = []

        content_type = (getattr(file, "content_type", "") or "").lower()
        if not content_type.startswith(cls.ALLOWED_PREFIXES):
            errors.append("Please select an audio or video file.")

        size_mb = file.size / (1024 * 1024)
        limit = cls.max_size_mb()
        if size_mb > limit:
            errors.append(f"File too large ({size_mb:.1f}MB). Limit: {limit}MB")

        if file.size == 0:
            errors.append("File is empty.")

        return {"valid": not errors, "errors": errors}
