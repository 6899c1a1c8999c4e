import logging, re
import os, typing as t

log = logging.getLogger("gridsql.database")

_PLACEHOLDER_RE = re.compile(r":(p\d+)\b")


def _load_p8_as_der_bytes(path: str) -> bytes:
    from cryptography.hazmat.primitives import serialization

    with open(path, "rb") as f:
        raw = f.read()
    is_pem = raw.lstrip().startswith(b"-----BEGIN")
    if is_pem:
        key = serialization.load_pem_private_key(raw, password=None)
    else:
        key = serialization.load_der_private_key(raw, password=None)

    # Snowflake needs unencrypted PKCS#8 DER bytes
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _sf_connect(*, role: str | None = None):
    import snowflake.connector

    options = dict(
        account=os.environ["SNOWFLAKE_ACCOUNT"],
        warehouse=os.environ["SNOWFLAKE_WAREHOUSE"],
        database=os.environ.get("SNOWFLAKE_DATABASE"),
        schema=os.environ.get("SNOWFLAKE_SCHEMA"),
        session_parameters={
            "QUERY_TAG": "api:gridsql",
        },
    )
    if role:
        options["role"] = role

    pkb = _load_p8_as_der_bytes(os.environ["SNOWFLAKE_PRIVATE_KEY_PATH"])
    return snowflake.connector.connect(
        user=os.environ["SNOWFLAKE_USER"],
        private_key=pkb,
        **options,
    )


def _to_pyformat(
    sql: str, params: t.Mapping[str, t.Any]
) -> tuple[str, t.Optional[dict[str, t.Any]]]:
    """
    Rewrite :p0 style placeholders for the connector's default pyformat
    binding. Only names present in `params` are touched.

    The connector runs `sql % params` whenever params are given, so literal
    `%` in the SQL (LIKE 'A%', modulo, format strings) is doubled first.
    With no params nothing is interpolated and the SQL is passed through.
    """
    if not params:
        return sql, None
    bound = {name.lstrip(":"): value for name, value in params.items()}

    def repl(m: re.Match) -> str:
        name = m.group(1)
        return f"%({name})s" if name in bound else m.group(0)

    return _PLACEHOLDER_RE.sub(repl, sql.replace("%", "%%")), bound


def execute_grid_query(
    sql: str,
    params: t.Mapping[str, t.Any],
    *,
    role: str | None = None,
) -> tuple[list[str], list[tuple]]:
    """Run one grid query and return (column names, rows)."""
    conn = _sf_connect(role=role)
    try:
        with conn.cursor() as cur:
            log.debug("Executing %s", sql)
            sql, bound = _to_pyformat(sql, params)
            cur.execute(sql, bound)
            cols = [d[0] for d in cur.description] if cur.description else []
            rows = cur.fetchall() if cur.description else []
        return cols, rows
    finally:
        conn.close()
