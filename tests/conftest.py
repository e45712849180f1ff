"""
Pytest fixtures for adaptive chunking tests.
"""

import pytest

from adaptive_chunking.token_counter import ApproximateTokenCounter


@pytest.fixture
def counter():
    """Deterministic token counter (ceil(chars / 4))."""
    return ApproximateTokenCounter()


@pytest.fixture
def regulatory_text():
    """20 sequential articles grouped into 3 chapters."""
    parts = []
    for i in range(1, 21):
        if i in (1, 8, 15):
            parts.append(f"Capitolo {i // 7 + 1}\n")
        parts.append(
            f"Articolo {i}\n"
            f"Il presente articolo disciplina la materia numero {i}. "
            f"Le disposizioni si applicano a tutti i soggetti interessati.\n"
        )
    return "\n".join(parts)


@pytest.fixture
def markdown_text():
    return (
        "Introduzione generale.\n"
        "\n"
        "# Primo\n"
        "\n"
        "Testo del primo capitolo.\n"
        "\n"
        "## Dettagli\n"
        "\n"
        "Altro testo qui.\n"
    )
