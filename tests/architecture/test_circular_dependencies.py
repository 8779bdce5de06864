import importlib

import pytest

# Modules in dependency order
MODULES = [
    # Independent modules (no internal deps)
    'datahelpers.exceptions',
    'datahelpers.cache',
    'datahelpers.sql',
    'datahelpers.types',
    'datahelpers.ordering',
    'datahelpers.iterutils',

    # Record description and conversion
    'datahelpers.describe',
    'datahelpers.table',
    'datahelpers.formatting',
    'datahelpers.serialization',

    # Strategy (self-contained)
    'datahelpers.strategy.base',
    'datahelpers.strategy.postgres',
    'datahelpers.strategy.sqlite',
    'datahelpers.strategy.sqlserver',
    'datahelpers.strategy',

    # Options, sinks and transfers
    'datahelpers.options',
    'datahelpers.sink',
    'datahelpers.connection',
    'datahelpers.transfer',

    # Main package
    'datahelpers',
]


@pytest.mark.parametrize('module', MODULES)
def test_module_imports(module):
    """Each module imports without circular dependencies"""
    assert importlib.import_module(module) is not None


def test_dependency_order():
    """Low-level modules do not import the sink layer"""
    for name in ('datahelpers.describe', 'datahelpers.table', 'datahelpers.formatting',
                 'datahelpers.serialization'):
        module = importlib.import_module(name)
        assert not hasattr(module, 'SqlAlchemySink'), name
        assert not hasattr(module, 'connect_sink'), name


if __name__ == '__main__':
    __import__('pytest').main([__file__])
