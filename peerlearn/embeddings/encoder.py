from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Sequence

import numpy as np

from .config import DEFAULT_EMBEDDING_CONFIG, EmbeddingConfig
from .errors import EmbeddingComputeError, ModelLoadError

logger = logging.getLogger(__name__)


def _load_sentence_transformer(config: EmbeddingConfig) -> Any:
    # torch is only imported once the first similarity request needs it
    from sentence_transformers import SentenceTransformer

    return SentenceTransformer(config.model_name)


_model: Any = None
_loader: Callable[[EmbeddingConfig], Any] = _load_sentence_transformer
_load_lock = threading.Lock()
_executor = ThreadPoolExecutor(
    max_workers=DEFAULT_EMBEDDING_CONFIG.max_workers,
    thread_name_prefix="embed",
)


def set_model_loader(loader: Callable[[EmbeddingConfig], Any]) -> None:
    """Replace the function used to build the model and drop any cached one."""
    global _loader
    _loader = loader
    reset_model()


def reset_model() -> None:
    global _model
    with _load_lock:
        _model = None


def get_model(config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG) -> Any:
    """
    Return the process-wide model, loading it on first call.

    Concurrent first callers wait on the load lock, so the loader runs once
    and every caller gets the same instance. Both the load itself and the
    wait for another caller's load are bounded by ``config.load_timeout``.
    A failed or timed-out load caches nothing and the next call retries.
    """
    global _model
    if _model is not None:
        return _model

    if not _load_lock.acquire(timeout=config.load_timeout):
        raise ModelLoadError(
            f"Timed out after {config.load_timeout}s waiting for model {config.model_name!r}"
        )
    try:
        if _model is None:
            logger.info("Loading sentence-transformer model %s", config.model_name)
            future = _executor.submit(_loader, config)
            try:
                model = future.result(timeout=config.load_timeout)
            except FutureTimeoutError as exc:
                future.cancel()
                logger.error(
                    "Loading model %s exceeded %ss", config.model_name, config.load_timeout,
                )
                raise ModelLoadError(
                    f"Loading model {config.model_name!r} exceeded {config.load_timeout}s"
                ) from exc
            except Exception as exc:
                logger.error("Failed to load model %s", config.model_name, exc_info=True)
                raise ModelLoadError(f"Could not load model {config.model_name!r}: {exc}") from exc
            _model = model
            logger.info("Model %s loaded", config.model_name)
        return _model
    finally:
        _load_lock.release()


def encode_batch(
    texts: Sequence[str],
    config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG,
) -> np.ndarray:
    """Encode a list of strings into a 2-D array of shape (N, dim) in one model call."""
    model = get_model(config)
    future = _executor.submit(model.encode, list(texts), show_progress_bar=False)
    try:
        vectors = future.result(timeout=config.encode_timeout)
    except FutureTimeoutError as exc:
        future.cancel()
        raise EmbeddingComputeError(
            f"Encoding {len(texts)} texts exceeded {config.encode_timeout}s"
        ) from exc
    except Exception as exc:
        raise EmbeddingComputeError(f"Encoding {len(texts)} texts failed: {exc}") from exc

    vectors = np.asarray(vectors, dtype=float)
    if vectors.ndim != 2 or vectors.shape[1] != config.dimension:
        raise EmbeddingComputeError(
            f"Model {config.model_name!r} returned vectors of shape {vectors.shape}, "
            f"expected (N, {config.dimension})"
        )
    return vectors


def encode_text(text: str, config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG) -> np.ndarray:
    """Encode a single string into a 1-D embedding vector."""
    return encode_batch([text], config)[0]
