"""Static reference data used by the collectors."""

from types import MappingProxyType
from typing import Mapping

#: Schemas skipped when no single database is configured
SYSTEM_SCHEMAS: frozenset[str] = frozenset(
    {"information_schema", "performance_schema", "mysql", "sys"}
)

#: Built-in engines, authentication plugins and InnoDB INFORMATION_SCHEMA
#: tables. Matched by exact, case-sensitive name.
BUILTIN_PLUGINS: frozenset[str] = frozenset(
    {
        "mysqlx_cache_cleaner",
        "sha2_cache_cleaner",
        "caching_sha2_password",
        "mysql_native_password",
        "sha256_password",
        "mysqlx",
        "ngram",
        "ARCHIVE",
        "binlog",
        "BLACKHOLE",
        "CSV",
        "FEDERATED",
        "InnoDB",
        "MEMORY",
        "MRG_MYISAM",
        "MyISAM",
        "ndbcluster",
        "ndbinfo",
        "PERFORMANCE_SCHEMA",
        "TempTable",
        "daemon_keyring_proxy_plugin",
        "INNODB_BUFFER_PAGE",
        "INNODB_BUFFER_PAGE_LRU",
        "INNODB_BUFFER_POOL_STATS",
        "INNODB_CACHED_INDEXES",
        "INNODB_CMP",
        "INNODB_CMPMEM",
        "INNODB_CMPMEM_RESET",
        "INNODB_CMP_PER_INDEX",
        "INNODB_CMP_PER_INDEX_RESET",
        "INNODB_CMP_RESET",
        "INNODB_COLUMNS",
        "INNODB_FT_BEING_DELETED",
        "INNODB_FT_CONFIG",
        "INNODB_FT_DEFAULT_STOPWORD",
        "INNODB_FT_DELETED",
        "INNODB_FT_INDEX_CACHE",
        "INNODB_FT_INDEX_TABLE",
        "INNODB_INDEXES",
        "INNODB_METRICS",
        "INNODB_SESSION_TEMP_TABLESPACES",
        "INNODB_TABLES",
        "INNODB_TABLESPACES",
        "INNODB_TABLESTATS",
        "INNODB_TEMP_TABLE_INFO",
        "INNODB_TRX",
        "INNODB_VIRTUAL",
        "ndb_transid_mysql_connection_map",
    }
)

#: Commonly overridden variables and their factory defaults, probed when the
#: server cannot report variable provenance.
COMMON_VARIABLE_DEFAULTS: Mapping[str, str] = MappingProxyType(
    {
        "character_set_server": "latin1",
        "collation_server": "latin1_swedish_ci",
        "max_connections": "151",
        "innodb_buffer_pool_size": "134217728",
        "datadir": "/var/lib/mysql/",
        "socket": "/var/run/mysqld/mysqld.sock",
        "pid_file": "/var/run/mysqld/mysqld.pid",
        "secure_file_priv": "",
        "skip_name_resolve": "OFF",
        "default_authentication_plugin": "mysql_native_password",
    }
)
