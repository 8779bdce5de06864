import pytest
from datahelpers.connection import create_url_from_options
from datahelpers.options import DEFAULT_BATCH_SIZE, DEFAULT_BULK_TIMEOUT
from datahelpers.options import SinkOptions


def test_init_defaults():
    """Test default initialization"""
    options = SinkOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
    )

    assert options.drivername == 'postgresql'
    assert options.appname is not None
    assert options.bulk_timeout == DEFAULT_BULK_TIMEOUT == 240
    assert options.batch_size == DEFAULT_BATCH_SIZE

    assert options.use_pool is False
    assert options.pool_max_connections == 5
    assert options.pool_max_idle_time == 300
    assert options.pool_wait_timeout == 30


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        SinkOptions(drivername='oracle', database='testdb')

    with pytest.raises(ValueError, match='cannot be None or 0'):
        SinkOptions(drivername='postgresql', hostname='testhost')

    with pytest.raises(ValueError):
        SinkOptions(drivername='sqlite')


@pytest.mark.parametrize('overrides', [
    {'bulk_timeout': -1},
    {'batch_size': 0},
])
def test_bulk_option_validation(overrides):
    with pytest.raises(ValueError):
        SinkOptions(drivername='sqlite', database='test.db', **overrides)


def test_sqlite_options():
    """SQLite needs only a database path"""
    options = SinkOptions(drivername='sqlite', database='test.db', bulk_timeout=0)
    assert options.bulk_timeout == 0
    url = create_url_from_options(options)
    assert url.drivername == 'sqlite'
    assert url.database == 'test.db'


def test_postgres_url():
    options = SinkOptions(hostname='db', username='u', password='p', database='d',
                          port=5432, timeout=10, appname='loader')
    url = create_url_from_options(options)
    assert url.drivername == 'postgresql+psycopg'
    assert url.host == 'db'
    assert url.port == 5432
    assert url.query['connect_timeout'] == '10'
    assert url.query['application_name'] == 'loader'


def test_sqlserver_url():
    options = SinkOptions(drivername='mssql', hostname='db', username='u', password='p',
                          database='d', appname='loader')
    url = create_url_from_options(options)
    assert url.drivername == 'mssql+pyodbc'
    assert url.query['driver'] == 'ODBC Driver 18 for SQL Server'
    assert url.query['APP'] == 'loader'
    assert url.port is None


if __name__ == '__main__':
    __import__('pytest').main([__file__])
