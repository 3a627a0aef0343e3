"""Tests for the sentence-transformers model adapter."""

import pytest


@pytest.fixture
def st_model():
    """Create the default 512-dimension model."""
    pytest.importorskip("sentence_transformers")

    from media_index.embeddings import SentenceTransformerModel

    return SentenceTransformerModel(device="cpu")


def test_model_not_loaded_until_used(st_model):
    """Construction does not load the model."""
    assert st_model.available is True
    assert st_model.is_loaded is False
    assert st_model.model_name == "sentence-transformers/distiluse-base-multilingual-cased-v2"


def test_vector_for(st_model):
    vector = st_model.vector_for("Cooking pasta at home")

    assert st_model.is_loaded is True
    assert isinstance(vector, list)
    assert len(vector) == 512
    assert all(isinstance(v, float) for v in vector)


@pytest.mark.asyncio
async def test_engine_with_sentence_transformer(st_model):
    """Engine output from a real model is unit length."""
    from media_index.embeddings import EmbeddingEngine

    engine = EmbeddingEngine(st_model)
    await engine.preload()

    vectors = await engine.generate_embeddings(["Intro to Swift", "Pasta night"])

    assert len(vectors) == 2
    for vector in vectors:
        assert sum(v * v for v in vector) == pytest.approx(1.0, abs=1e-5)


def test_missing_dependency_reports_unavailable(monkeypatch):
    """Without sentence-transformers installed the adapter is unavailable."""
    import importlib.util

    from media_index.embeddings import SentenceTransformerModel

    monkeypatch.setattr(importlib.util, "find_spec", lambda name: None)

    model = SentenceTransformerModel()

    assert model.available is False
    assert model.is_loaded is False
