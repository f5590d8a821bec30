from __future__ import annotations

import numpy as np
import pytest

from peerlearn.embeddings import encoder
from peerlearn.embeddings.config import DEFAULT_EMBEDDING_CONFIG
from peerlearn.embeddings.similarity import cosine_similarity, text_similarity


DIM = DEFAULT_EMBEDDING_CONFIG.dimension


def _vector(text: str) -> np.ndarray:
    vec = np.zeros(DIM)
    vec[0] = float(len(text))
    vec[1] = 1.0
    return vec


class CountingModel:
    def __init__(self):
        self.calls: list[list[str]] = []

    def encode(self, texts, show_progress_bar=False):
        self.calls.append(list(texts))
        return np.array([_vector(t) for t in texts])


@pytest.fixture(autouse=True)
def _restore_loader():
    yield
    encoder.set_model_loader(encoder._load_sentence_transformer)


def _install_counting_model():
    model = CountingModel()
    loads = []

    def loader(config):
        loads.append(1)
        return model

    encoder.set_model_loader(loader)
    return model, loads


# ── cosine_similarity ────────────────────────────────────────────────────


def test_cosine_of_vector_with_itself_is_one():
    vec = [0.3, -1.2, 4.0, 0.5]
    assert cosine_similarity(vec, vec) == pytest.approx(1.0)


def test_cosine_of_orthogonal_vectors_is_zero():
    assert cosine_similarity([1.0, 0.0], [0.0, 5.0]) == pytest.approx(0.0)


def test_cosine_of_opposite_vectors_is_minus_one():
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_cosine_with_zero_vector_is_zero():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], np.zeros(3)) == 0.0


# ── text_similarity ──────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "text1, text2",
    [("", "python"), ("python", ""), ("   ", "python"), ("python", "\n\t"), (None, "python"), ("", "")],
)
def test_blank_text_returns_zero_without_model(text1, text2):
    model, loads = _install_counting_model()
    assert text_similarity(text1, text2) == 0.0
    assert loads == []
    assert model.calls == []


def test_texts_are_embedded_in_one_batch():
    model, loads = _install_counting_model()
    score = text_similarity("python django", "python flask")
    assert model.calls == [["python django", "python flask"]]
    assert len(loads) == 1
    assert -1.0 <= score <= 1.0


def test_identical_texts_score_one():
    _install_counting_model()
    assert text_similarity("graph theory", "graph theory") == pytest.approx(1.0)


def test_encode_failure_degrades_to_zero():
    class BrokenModel:
        def encode(self, texts, show_progress_bar=False):
            raise RuntimeError("tokenizer exploded")

    encoder.set_model_loader(lambda config: BrokenModel())
    assert text_similarity("react", "vue") == 0.0


def test_model_load_failure_degrades_to_zero():
    def failing_loader(config):
        raise OSError("no network")

    encoder.set_model_loader(failing_loader)
    assert text_similarity("react", "vue") == 0.0
