"""
Embeddings layer for semantic peer matching.

Responsibilities:
- Load a lightweight sentence-transformer model once per process.
- Encode profile text fragments at request time.
- Provide cosine similarity scores for peer candidate ranking.
"""
