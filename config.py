import os
from dotenv import load_dotenv
from utils import decrypt_secret

load_dotenv()


def _default_option_files():
    # Same defaults file the mysql command line client reads
    path = os.path.expanduser('~/.my.cnf')
    return path if os.path.isfile(path) else None


def _resolve_password():
    password = os.environ.get('MYSQL_PASSWORD')
    if password is not None:
        return password

    token = os.environ.get('MYSQL_PASSWORD_ENC')
    secret_key = os.environ.get('SECRET_KEY')
    if token and secret_key:
        return decrypt_secret(token, secret_key)
    return None


class Config:
    # Database whose presence (and tables) is checked
    DB_NAME = os.environ.get('DB_NAME', 'api_production')

    # Connection settings. Anything left as None falls back to the
    # client defaults (option files, localhost, current user).
    MYSQL_HOST = os.environ.get('MYSQL_HOST')
    MYSQL_PORT = os.environ.get('MYSQL_PORT')
    MYSQL_USER = os.environ.get('MYSQL_USER')
    MYSQL_PASSWORD = _resolve_password()

    # Comma separated list, e.g. "/etc/mysql/my.cnf,~/.my.cnf"
    MYSQL_OPTION_FILES = os.environ.get('MYSQL_OPTION_FILES', _default_option_files())

    MYSQL_CONNECT_TIMEOUT = int(os.environ.get('MYSQL_CONNECT_TIMEOUT', 10))

    # Fernet key used for MYSQL_PASSWORD_ENC.
    # generate one via: python gen_key_script.py
    SECRET_KEY = os.environ.get('SECRET_KEY')
