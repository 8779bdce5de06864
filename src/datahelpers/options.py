from dataclasses import dataclass

from datahelpers.strategy import get_available_dialects, get_strategy_class
from datahelpers.strategy import is_supported_dialect

from libb import ConfigOptions, scriptname

__all__ = [
    'SinkOptions',
    'DEFAULT_BULK_TIMEOUT',
    'DEFAULT_BATCH_SIZE',
]

DEFAULT_BULK_TIMEOUT = 240
DEFAULT_BATCH_SIZE = 1000


@dataclass
class SinkOptions(ConfigOptions):
    """Options

    supported driver names: `postgresql`, `sqlite`, `mssql`

    Bulk copy options:
    - bulk_timeout: Seconds a single transfer may run, 0 for no limit (default: 240)
    - batch_size: Rows sent per executemany call (default: 1000)

    Connection pooling options:
    - use_pool: Whether to use connection pooling (default: False)
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Maximum seconds a connection can be idle (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    driver: str = 'ODBC Driver 18 for SQL Server'
    bulk_timeout: int = DEFAULT_BULK_TIMEOUT
    batch_size: int = DEFAULT_BATCH_SIZE
    # Connection pooling parameters
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ValueError(f'drivername must be one of: {available}')
        self.appname = self.appname or scriptname() or 'python_console'
        strategy_cls = get_strategy_class(self.drivername)
        strategy_cls.validate_options(self)
        if self.bulk_timeout < 0:
            raise ValueError('bulk_timeout cannot be negative')
        if self.batch_size < 1:
            raise ValueError('batch_size must be at least 1')
