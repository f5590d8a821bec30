from __future__ import annotations


class ModelLoadError(RuntimeError):
    """The sentence-transformer model could not be loaded."""


class EmbeddingComputeError(RuntimeError):
    """Encoding texts with the loaded model failed or timed out."""
