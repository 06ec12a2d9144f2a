from pathlib import Path

import pytest

from fcamap.data_structures import Concept
from fcamap.parse import OntologyModel

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def source_model():
    model = OntologyModel(DATA_DIR / "source.ttl")
    yield model
    model.close()


@pytest.fixture
def target_model():
    model = OntologyModel(DATA_DIR / "target.ttl")
    yield model
    model.close()


@pytest.fixture
def textbook_concepts():
    """The classical five-concept example over objects {1, 2, 3, 4} and attributes {a, b, c}."""
    return [
        Concept({1, 2, 3, 4}, set()),
        Concept({1, 2}, {"a"}),
        Concept({3, 4}, {"b"}),
        Concept({1}, {"a", "c"}),
        Concept(set(), {"a", "b", "c"}),
    ]
