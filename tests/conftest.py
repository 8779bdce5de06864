import pathlib
import site

import pytest
from datahelpers.cache import DescriptorCache

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear the descriptor cache before and after each test to ensure test isolation."""
    DescriptorCache.get_instance().clear()
    yield
    DescriptorCache.get_instance().clear()


pytest_plugins = [
    'tests.fixtures.records',
    'tests.fixtures.sqlite',
]
