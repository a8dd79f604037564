"""
Serviço de Storage para Cloudflare R2.

Convenção de nomes de arquivos:
- Áudios originais: audio/{user_id}/{transcription_id}/{original_filename}
- Transcrições: transcripts/{user_id}/{transcription_id}/transcript.json
"""

import os

import boto3
from botocore.exceptions import ClientError
from django.conf import settings


class R2StorageService:
    """Serviço para gerenciar uploads/downloads em Cloudflare R2."""

    def __init__(self):
        """Inicializa cliente S3 para Cloudflare R2."""
        self.account_id = settings.CLOUDFLARE_ACCOUNT_ID
        self.bucket_name = settings.CLOUDFLARE_BUCKET_NAME
        self.endpoint_url = f"https://{self.account_id}.r2.cloudflarestorage.com"

        self.client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=settings.CLOUDFLARE_ACCESS_KEY_ID,
            aws_secret_access_key=settings.CLOUDFLARE_SECRET_ACCESS_KEY,
            region_name="auto",
        )

    @staticmethod
    def is_configured() -> bool:
        return all([
            getattr(settings, "CLOUDFLARE_ACCOUNT_ID", None),
            getattr(settings, "CLOUDFLARE_ACCESS_KEY_ID", None),
            getattr(settings, "CLOUDFLARE_SECRET_ACCESS_KEY", None),
            getattr(settings, "CLOUDFLARE_BUCKET_NAME", None),
        ])

    def upload_audio(
        self,
        file_path: str,
        user_id: str,
        transcription_id: str,
        original_filename: str,
    ) -> str:
        """
        Faz upload do áudio original para R2.

        Returns:
            Caminho no R2 (storage_path)
        """
        key = f"audio/{user_id}/{transcription_id}/{os.path.basename(original_filename)}"
        return self._upload_file(file_path, key)

    def upload_transcript(self, file_path: str, user_id: str, transcription_id: str) -> str:
        key = f"transcripts/{user_id}/{transcription_id}/transcript.json"
        return self._upload_file(file_path, key)

    def _upload_file(self, file_path: str, key: str) -> str:
        try:
            with open(file_path, "rb") as f:
                self.client.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=f,
                )
            return key
        except ClientError as e:
            raise Exception(f"Erro ao fazer upload para R2: {e}") from e
        except FileNotFoundError as e:
            raise Exception(f"Arquivo não encontrado: {file_path}") from e

    def get_signed_url(self, key: str, expiration: int = 3600) -> str:
        """Gera URL assinada (com expiração) para baixar o áudio."""
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expiration,
            )
        except ClientError as e:
            raise Exception(f"Erro ao gerar URL assinada: {e}") from e

    def delete_prefix(self, prefix: str) -> int:
        """Deleta todos os arquivos sob um prefixo. Retorna quantos foram removidos."""
        try:
            response = self.client.list_objects_v2(Bucket=self.bucket_name, Prefix=prefix)
            keys = [{"Key": obj["Key"]} for obj in response.get("Contents", [])]
            if keys:
                self.client.delete_objects(Bucket=self.bucket_name, Delete={"Objects": keys})
            return len(keys)
        except ClientError as e:
            raise Exception(f"Erro ao deletar arquivos do R2: {e}") from e
