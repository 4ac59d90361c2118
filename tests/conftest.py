import pytest

from bindgraph import ClassHierarchy, ConfigurationBuilder
from shapes import shapes_descriptors


@pytest.fixture
def shapes_hierarchy():
    return ClassHierarchy.build(shapes_descriptors())


@pytest.fixture
def shapes_builder(shapes_hierarchy):
    return ConfigurationBuilder(shapes_hierarchy)
