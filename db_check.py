import argparse
import os
import sys
import mysql.connector
from config import Config
from tap import TapReporter

# settings key -> mysql.connector.connect() argument
CONNECTION_SETTINGS = [
    ('MYSQL_HOST', 'host'),
    ('MYSQL_PORT', 'port'),
    ('MYSQL_USER', 'user'),
    ('MYSQL_PASSWORD', 'password'),
]


def load_settings():
    """Settings from the Config class as a plain dict (same shape as Flask's app.config)."""
    return {key: getattr(Config, key) for key in dir(Config) if key.isupper()}


def build_connection_kwargs(settings, database=None) -> dict:
    """
    Translates settings into keyword arguments for mysql.connector.connect().
    Unset values are left out so the client defaults (and option files) apply.
    """
    kwargs = {}
    for key, arg in CONNECTION_SETTINGS:
        value = settings.get(key)
        if value is None:
            continue
        # an empty password is a real password, an empty host is not
        if value == '' and key != 'MYSQL_PASSWORD':
            continue
        kwargs[arg] = value

    if 'port' in kwargs:
        kwargs['port'] = int(kwargs['port'])

    option_files = settings.get('MYSQL_OPTION_FILES')
    if isinstance(option_files, str):
        option_files = [p.strip() for p in option_files.split(',') if p.strip()]
    if option_files:
        kwargs['option_files'] = [os.path.expanduser(p) for p in option_files]
        kwargs['option_groups'] = ['client', 'mysql']

    timeout = settings.get('MYSQL_CONNECT_TIMEOUT')
    if timeout:
        kwargs['connection_timeout'] = int(timeout)

    if database:
        kwargs['database'] = database
    return kwargs


def make_connector(settings):
    def connect(database=None):
        return mysql.connector.connect(**build_connection_kwargs(settings, database))
    return connect


def _as_text(value):
    if isinstance(value, (bytes, bytearray)):
        return value.decode()
    return str(value)


def list_databases(conn) -> list:
    cursor = conn.cursor()
    try:
        cursor.execute("SHOW DATABASES")
        return [_as_text(row[0]) for row in cursor.fetchall()]
    finally:
        cursor.close()


def quote_identifier(name: str) -> str:
    return '`' + name.replace('`', '``') + '`'


def list_tables(conn, database: str) -> list:
    cursor = conn.cursor()
    try:
        cursor.execute(f"SHOW TABLES FROM {quote_identifier(database)}")
        return [_as_text(row[0]) for row in cursor.fetchall()]
    finally:
        cursor.close()


def _query(connect, fn, *args):
    """
    Opens a connection, runs fn(conn, *args) and closes it again.
    Returns (result, error); error is the mysql.connector.Error if one was raised,
    or the ValueError connect() gives for an unreadable option file or a bad port.
    """
    conn = None
    try:
        conn = connect()
        return fn(conn, *args), None
    except (mysql.connector.Error, ValueError) as e:
        return None, e
    finally:
        if conn is not None:
            conn.close()


def match_database(databases: list, name: str) -> str:
    """
    The exact entry if present, otherwise every entry containing `name`
    (one per line, like grepping `show databases` output), or ''.
    """
    if name in databases:
        return name
    return '\n'.join(db for db in databases if name in db)


def check_database(reporter, connect, database: str, verbose=False):
    """Runs the two assertions for one database."""

    # 1. Does the database exist?
    databases, error = _query(connect, list_databases)
    got = match_database(databases or [], database)
    reporter.is_(got, database, "Checking if database exists")
    if error is not None:
        reporter.diag(f"  error: {error}")

    # 2. Does it hold any tables?
    tables, error = _query(connect, list_tables, database)
    reporter.ok(bool(tables), f"Checking if tables in database {database}")
    if error is not None:
        reporter.diag(f"  error: {error}")

    if verbose and tables:
        reporter.note(f"{len(tables)} table(s) in {database}: {', '.join(tables)}")


def run_checks(reporter, connect, databases: list, verbose=False) -> int:
    reporter.plan(2 * len(databases))
    for database in databases:
        check_database(reporter, connect, database, verbose=verbose)
    return reporter.finish()


def build_parser():
    parser = argparse.ArgumentParser(
        prog='dbtap',
        description="Check that a MySQL database exists and has tables, reporting as TAP.",
    )
    parser.add_argument('databases', nargs='*', metavar='DATABASE',
                        help=f"database(s) to check (default: {Config.DB_NAME})")
    parser.add_argument('--host', help="MySQL server host")
    parser.add_argument('--port', type=int, help="MySQL server port")
    parser.add_argument('--user', help="MySQL user")
    parser.add_argument('--defaults-file', dest='defaults_file',
                        help="option file to read connection defaults from (like mysql --defaults-file)")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="list the tables found as TAP comments")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings()
    if args.host:
        settings['MYSQL_HOST'] = args.host
    if args.port:
        settings['MYSQL_PORT'] = args.port
    if args.user:
        settings['MYSQL_USER'] = args.user
    if args.defaults_file:
        settings['MYSQL_OPTION_FILES'] = args.defaults_file

    databases = args.databases or [settings['DB_NAME']]
    return run_checks(TapReporter(), make_connector(settings), databases, verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())
