"""
Snowflake Operations Module
===========================
Connects to Snowflake and inspects virtual warehouses for the test harness.

Functions:
    - load_private_key: Decode PEM key material into PKCS#8 DER bytes
    - build_connection_params: Build connector arguments from settings
    - describe_connection: Render a redacted connection descriptor for logs
    - open_connection: Open and ping a Snowflake connection
    - build_show_warehouses_query: Render the introspection query
    - build_column_index: Map result column names to positions
    - warehouse_exists: Check whether a warehouse is visible
    - fetch_warehouse_details: Read named SHOW WAREHOUSES columns
    - fetch_warehouse_properties: Read name/size/comment of a warehouse
"""

import logging
from typing import Any, Dict, Iterable, NamedTuple, Optional, Sequence

import snowflake.connector
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from snowflake.connector.errors import Error as SnowflakeError

from harness_scripts.error_handling import (
    AuthenticationError,
    ConfigurationError,
    ConnectivityError,
    MissingColumnError,
    NotFoundError,
)


logger = logging.getLogger(__name__)

SHOW_WAREHOUSES_SQL = "SHOW WAREHOUSES LIKE '{pattern}';"
RESULT_SCAN_SQL = "SELECT * FROM TABLE(RESULT_SCAN('{query_id}'));"
PING_SQL = "SELECT 1"
JWT_AUTHENTICATOR = 'SNOWFLAKE_JWT'

PROPERTY_COLUMNS = ('name', 'size', 'comment')
OPTIONAL_CONNECTION_FIELDS = ('role', 'warehouse', 'database', 'schema')


class WarehouseProperties(NamedTuple):
    """Warehouse attributes as reported by SHOW WAREHOUSES."""

    name: str
    size: str
    comment: str


def load_private_key(private_key_pem: str, passphrase: Optional[str] = None) -> bytes:
    """
    Decode a PEM private key into the DER bytes the connector expects.

    Accepts PKCS#8 ("BEGIN PRIVATE KEY") and PKCS#1 ("BEGIN RSA PRIVATE KEY")
    encodings. Keys copied from CI secrets often carry literal "\\n"
    sequences instead of newlines; those are unescaped first.

    Args:
        private_key_pem: PEM-encoded RSA private key
        passphrase: Passphrase for an encrypted key

    Returns:
        bytes: Unencrypted PKCS#8 DER encoding of the key

    Raises:
        AuthenticationError: If the key is empty, undecodable or not RSA
    """
    if not private_key_pem or not private_key_pem.strip():
        raise AuthenticationError("Private key is empty")

    pem_text = private_key_pem.strip().replace('\\n', '\n')
    password = passphrase.encode('utf-8') if passphrase else None

    try:
        private_key = serialization.load_pem_private_key(
            pem_text.encode('utf-8'),
            password=password
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.error("Failed to decode private key material")
        raise AuthenticationError(f"Failed to parse private key: {e}") from e

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise AuthenticationError("Private key is not RSA")

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def build_connection_params(settings: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build snowflake.connector.connect() arguments from harness settings.

    Key-pair authentication wins when a private key is present; otherwise a
    password is required.

    Args:
        settings: Snowflake settings (see config_loader.load_snowflake_settings)

    Returns:
        dict: Keyword arguments for snowflake.connector.connect

    Raises:
        ConfigurationError: If account or user is missing
        AuthenticationError: If no usable credentials are supplied

    Example:
        >>> params = build_connection_params({
        >>>     'account': 'myorg-myaccount',
        >>>     'user': 'TERRATEST',
        >>>     'password': 'secret',
        >>>     'role': 'SYSADMIN'
        >>> })
    """
    account = settings.get('account')
    user = settings.get('user')

    if not account:
        raise ConfigurationError("Snowflake account identifier is required")
    if not user:
        raise ConfigurationError("Snowflake user is required")

    params = {
        'account': account,
        'user': user,
    }

    if settings.get('private_key'):
        params['authenticator'] = JWT_AUTHENTICATOR
        params['private_key'] = load_private_key(
            settings['private_key'],
            settings.get('private_key_passphrase')
        )
    elif settings.get('password'):
        params['password'] = settings['password']
    else:
        raise AuthenticationError("Either a private key or a password must be supplied")

    for field in OPTIONAL_CONNECTION_FIELDS:
        if settings.get(field):
            params[field] = settings[field]

    return params


def describe_connection(params: Dict[str, Any]) -> str:
    """
    Render a DSN-style descriptor of connection params without secrets.

    Example:
        >>> describe_connection({'account': 'org-acct', 'user': 'ME', 'password': 'x'})
        'snowflake://ME@org-acct?authenticator=password'
    """
    options = [f"authenticator={params.get('authenticator', 'password').lower()}"]
    for field in OPTIONAL_CONNECTION_FIELDS:
        if params.get(field):
            options.append(f"{field}={params[field]}")

    return f"snowflake://{params.get('user')}@{params.get('account')}?{'&'.join(options)}"


def ping(conn) -> None:
    """Run a trivial query to prove the session is usable."""
    cursor = conn.cursor()
    try:
        cursor.execute(PING_SQL)
        cursor.fetchone()
    finally:
        cursor.close()


def open_connection(settings: Dict[str, Any]):
    """
    Open a Snowflake connection and verify it with a ping.

    A single attempt is made; there is no retry.

    Args:
        settings: Snowflake settings

    Returns:
        SnowflakeConnection: Open connection (caller closes)

    Raises:
        ConfigurationError: If account or user is missing
        AuthenticationError: If credentials are malformed
        ConnectivityError: If connecting or pinging fails
    """
    params = build_connection_params(settings)
    descriptor = describe_connection(params)

    logger.info(f"Connecting to {descriptor}")

    try:
        conn = snowflake.connector.connect(**params)
    except SnowflakeError as e:
        logger.error(f"Connection to {descriptor} failed: {e}")
        raise ConnectivityError(f"Failed to connect to Snowflake account {params['account']}: {e}") from e

    try:
        ping(conn)
    except SnowflakeError as e:
        conn.close()
        logger.error(f"Ping on {descriptor} failed: {e}")
        raise ConnectivityError(f"Snowflake ping failed for account {params['account']}: {e}") from e

    logger.info(f"Snowflake connection established to {params['account']}")
    return conn


class SnowflakeConnection:
    """Context manager owning one Snowflake connection."""

    def __init__(self, settings: Dict[str, Any]):
        """
        Args:
            settings: Snowflake settings used to open the connection
        """
        self.settings = settings
        self.conn = None

    def __enter__(self):
        """Open connection."""
        self.conn = open_connection(self.settings)
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Snowflake connection closed")


def escape_like(value: str) -> str:
    """Double single quotes so the value is safe inside a quoted literal."""
    return value.replace("'", "''")


def build_show_warehouses_query(warehouse_name: str) -> str:
    """
    Render the introspection query for a warehouse name.

    Example:
        >>> build_show_warehouses_query("O'BRIEN_WH")
        "SHOW WAREHOUSES LIKE 'O''BRIEN_WH';"
    """
    return SHOW_WAREHOUSES_SQL.format(pattern=escape_like(warehouse_name))


def build_column_index(description: Optional[Sequence[Sequence[Any]]]) -> Dict[str, int]:
    """
    Map lower-cased column names to their positions in a result.

    The column set and order of SHOW output varies across Snowflake
    releases, so positions are resolved per response.

    Args:
        description: DB-API cursor.description

    Returns:
        dict: column name -> index (first occurrence wins)
    """
    index = {}
    for position, column in enumerate(description or ()):
        index.setdefault(str(column[0]).lower(), position)
    return index


def resolve_columns(index: Dict[str, int], columns: Iterable[str]) -> Dict[str, int]:
    """
    Look up the positions of the requested columns.

    Raises:
        MissingColumnError: If any requested column is absent
    """
    positions = {}
    for column in columns:
        position = index.get(column.lower())
        if position is None:
            raise MissingColumnError(f"{column} column not found in SHOW WAREHOUSES output")
        positions[column] = position
    return positions


def normalize_value(value: Any) -> str:
    """Render a column value as text; NULL becomes an empty string."""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8')
    return str(value)


def _run_introspection(cursor, warehouse_name: str, use_result_scan: bool) -> None:
    cursor.execute(build_show_warehouses_query(warehouse_name))

    if use_result_scan:
        query_id = cursor.sfqid
        logger.debug(f"Reading SHOW WAREHOUSES result through RESULT_SCAN of query {query_id}")
        cursor.execute(RESULT_SCAN_SQL.format(query_id=query_id))


def warehouse_exists(conn, warehouse_name: str) -> bool:
    """
    Check whether at least one warehouse matches the name.

    Args:
        conn: Open Snowflake connection
        warehouse_name: Warehouse name (LIKE pattern)

    Returns:
        bool: True if the introspection query returned a row
    """
    cursor = conn.cursor()
    try:
        cursor.execute(build_show_warehouses_query(warehouse_name))
        exists = cursor.fetchone() is not None
    finally:
        cursor.close()

    logger.info(f"Warehouse {warehouse_name} exists: {exists}")
    return exists


def fetch_warehouse_details(
    conn,
    warehouse_name: str,
    columns: Iterable[str],
    use_result_scan: bool = False
) -> Dict[str, str]:
    """
    Read arbitrary SHOW WAREHOUSES columns of the first matching warehouse.

    Args:
        conn: Open Snowflake connection
        warehouse_name: Warehouse name (LIKE pattern)
        columns: Column names to read (case-insensitive)
        use_result_scan: Re-read the SHOW output through RESULT_SCAN(<query id>)

    Returns:
        dict: column -> text value ('' for NULL)

    Raises:
        MissingColumnError: If a requested column is not in the output
        NotFoundError: If no warehouse matches

    Example:
        >>> details = fetch_warehouse_details(
        >>>     conn, "TT_TRANSFORM_AB12CD", ["type", "auto_suspend", "max_cluster_count"]
        >>> )
        >>> details["max_cluster_count"]
        '2'
    """
    columns = list(columns)

    cursor = conn.cursor()
    try:
        _run_introspection(cursor, warehouse_name, use_result_scan)
        positions = resolve_columns(build_column_index(cursor.description), columns)
        row = cursor.fetchone()
    finally:
        cursor.close()

    if row is None:
        raise NotFoundError(f"No warehouse found matching {warehouse_name}")

    return {column: normalize_value(row[position]) for column, position in positions.items()}


def fetch_warehouse_properties(
    conn,
    warehouse_name: str,
    use_result_scan: bool = False
) -> WarehouseProperties:
    """
    Read name, size and comment of the first matching warehouse.

    Args:
        conn: Open Snowflake connection
        warehouse_name: Warehouse name (LIKE pattern)
        use_result_scan: Re-read the SHOW output through RESULT_SCAN(<query id>)

    Returns:
        WarehouseProperties: e.g. ('TT_WH_X1', 'X-Small', 'test')

    Raises:
        MissingColumnError: If name, size or comment is not in the output
        NotFoundError: If no warehouse matches
    """
    details = fetch_warehouse_details(conn, warehouse_name, PROPERTY_COLUMNS, use_result_scan)
    properties = WarehouseProperties(**details)

    logger.info(f"Fetched warehouse properties: {properties}")
    return properties
