"""
Motor de transcrição com Whisper.

O modelo é carregado uma única vez por processo (GPU se disponível,
com fallback para CPU) e a inferência roda em janelas fixas com
sobreposição entre janelas consecutivas.
"""

import logging
import math
import threading
from typing import Any, Dict, List, Tuple

from django.conf import settings

from ..exceptions import TranscriptionUnavailableError

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000
DEFAULT_CONFIDENCE = 0.85


def chunk_windows(
    total_samples: int,
    chunk_seconds: float,
    stride_seconds: float,
    sample_rate: int = SAMPLE_RATE,
) -> List[Tuple[int, int]]:
    """
    Janelas (início, fim) em amostras.

    Cada janela começa stride_seconds antes do fim da anterior.
    """
    if total_samples <= 0:
        return []

    chunk = int(chunk_seconds * sample_rate)
    stride = int(stride_seconds * sample_rate)
    if chunk <= 0:
        raise ValueError("chunk_seconds must be positive")
    if stride < 0 or stride >= chunk:
        raise ValueError("stride_seconds must be between 0 and chunk_seconds")

    step = chunk - stride
    windows = []
    start = 0
    while True:
        end = min(start + chunk, total_samples)
        windows.append((start, end))
        if end >= total_samples:
            break
        start += step
    return windows


def segment_confidence(segment: Dict[str, Any]) -> float:
    avg_logprob = segment.get("avg_logprob")
    if avg_logprob is None:
        return DEFAULT_CONFIDENCE
    return float(max(0.0, min(1.0, math.exp(avg_logprob))))


def merge_chunk_segments(
    chunk_results: List[Tuple[float, List[Dict[str, Any]]]],
    stride_seconds: float,
) -> List[Dict[str, Any]]:
    """
    Junta os segmentos de cada janela em tempo absoluto.

    A sobreposição entre duas janelas é cortada ao meio: cada segmento fica
    com a janela em que cai o seu ponto médio, então nenhum trecho de áudio
    é duplicado nem perdido.
    """
    half_stride = stride_seconds / 2
    merged = []
    for index, (offset, segments) in enumerate(chunk_results):
        lower = offset + half_stride if index > 0 else None
        upper = chunk_results[index + 1][0] + half_stride if index + 1 < len(chunk_results) else None

        for seg in segments:
            text = (seg.get("text") or "").strip()
            if not text:
                continue

            start = offset + float(seg.get("start", 0))
            end = offset + float(seg.get("end", seg.get("start", 0)))
            midpoint = start + (end - start) / 2
            if lower is not None and midpoint < lower:
                continue
            if upper is not None and midpoint >= upper:
                continue

            merged.append({
                "start": round(start, 2),
                "end": round(end, 2),
                "text": text,
                "confidence": segment_confidence(seg),
            })
    return merged


class TranscriptionEngine:
    """Singleton que mantém o modelo Whisper carregado."""

    _instance = None
    _instance_lock = threading.Lock()

    def __init__(self):
        self.model = None
        self.device = None
        self._loading = False
        self._load_lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> "TranscriptionEngine":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def is_ready(self) -> bool:
        return self.model is not None and not self._loading

    def is_initializing(self) -> bool:
        return self._loading

    def initialize(self) -> None:
        if self.model is not None:
            return

        with self._load_lock:
            if self.model is not None:
                return

            import torch
            import whisper

            model_size = getattr(settings, "WHISPER_MODEL", None) or "tiny.en"
            preferred = getattr(settings, "WHISPER_DEVICE", None) or (
                "cuda" if torch.cuda.is_available() else "cpu"
            )

            self._loading = True
            try:
                logger.info(f"[TRANSCRIBE] Carregando Whisper '{model_size}' em '{preferred}'...")
                try:
                    self.model = whisper.load_model(model_size, device=preferred)
                    self.device = preferred
                except Exception as e:
                    if preferred == "cpu":
                        logger.error(f"[TRANSCRIBE] Falha ao carregar Whisper: {e}", exc_info=True)
                        raise TranscriptionUnavailableError("Unable to initialize transcription service")

                    logger.warning(f"[TRANSCRIBE] {preferred} indisponível, usando CPU: {e}")
                    if preferred == "cuda":
                        torch.cuda.empty_cache()
                    try:
                        self.model = whisper.load_model(model_size, device="cpu")
                        self.device = "cpu"
                    except Exception as cpu_error:
                        logger.error(f"[TRANSCRIBE] Falha ao carregar Whisper na CPU: {cpu_error}", exc_info=True)
                        raise TranscriptionUnavailableError("Unable to initialize transcription service")
            finally:
                self._loading = False

    def load_audio(self, audio_path: str):
        """Lê o arquivo como áudio mono 16 kHz (via ffmpeg do Whisper)."""
        import whisper

        return whisper.load_audio(audio_path)

    def transcribe_audio(self, audio) -> Dict[str, Any]:
        """
        Transcreve o áudio em janelas e devolve texto e segmentos absolutos.
        """
        self.initialize()

        chunk_seconds = float(getattr(settings, "TRANSCRIPTION_CHUNK_SECONDS", 30))
        stride_seconds = float(getattr(settings, "TRANSCRIPTION_STRIDE_SECONDS", 5))
        duration = len(audio) / SAMPLE_RATE

        chunk_results: List[Tuple[float, List[Dict[str, Any]]]] = []
        windows = chunk_windows(len(audio), chunk_seconds, stride_seconds)
        for start, end in windows:
            result = self.model.transcribe(
                audio[start:end],
                fp16=self.device == "cuda",
                condition_on_previous_text=False,
            )
            chunk_results.append((start / SAMPLE_RATE, result.get("segments", [])))

        segments = merge_chunk_segments(chunk_results, stride_seconds)
        text = " ".join(seg["text"] for seg in segments).strip()

        logger.info(
            f"[TRANSCRIBE] {len(windows)} janelas, {len(segments)} segmentos, "
            f"{duration:.1f}s de áudio"
        )

        return {
            "text": text or "No speech detected",
            "segments": segments,
            "duration": duration,
        }

    def transcribe(self, audio_path: str) -> Dict[str, Any]:
        return self.transcribe_audio(self.load_audio(audio_path))


def get_engine() -> TranscriptionEngine:
    return TranscriptionEngine.get_instance()
