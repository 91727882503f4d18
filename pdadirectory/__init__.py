from pdadirectory.address import decode_address, encode_address, to_hex
from pdadirectory.app import build_app, create_app
from pdadirectory.config import DEFAULT_LIMIT, MAX_LIMIT, Limits, Settings
from pdadirectory.errors import (
    ConfigurationError,
    FormatError,
    PdaDirectoryError,
    RateLimitError,
    ValidationError,
)
from pdadirectory.kv import HttpKV, MemoryKV
from pdadirectory.query import Intent, PageMode, QueryPlan, execute, plan_query
from pdadirectory.ratelimit import AllowAll, HttpRateLimiter
from pdadirectory.router import DatabaseRouter
from pdadirectory.seeds import Seed, build_seeds, decode_seeds
from pdadirectory.service import PdaService
from pdadirectory.store import (
    MemoryRegistryStore,
    RegistryRow,
    SqliteRegistryStore,
    init_schema,
)
from pdadirectory.validate import PdaRequest, validate_request

__all__ = [
    "AllowAll",
    "ConfigurationError",
    "DEFAULT_LIMIT",
    "DatabaseRouter",
    "FormatError",
    "HttpKV",
    "HttpRateLimiter",
    "Intent",
    "Limits",
    "MAX_LIMIT",
    "MemoryKV",
    "MemoryRegistryStore",
    "PageMode",
    "PdaDirectoryError",
    "PdaRequest",
    "PdaService",
    "QueryPlan",
    "RateLimitError",
    "RegistryRow",
    "Seed",
    "Settings",
    "SqliteRegistryStore",
    "ValidationError",
    "build_app",
    "build_seeds",
    "create_app",
    "decode_address",
    "decode_seeds",
    "encode_address",
    "execute",
    "init_schema",
    "plan_query",
    "to_hex",
    "validate_request",
]
