import sys
from cryptography.fernet import Fernet

def encrypt_secret(value: str, secret_key) -> str:
    """
    Encrypts a secret (e.g. the MySQL password) with the Fernet key.
    Returns the token as a string, or None if the key is unusable.
    """
    try:
        if isinstance(secret_key, str):
            secret_key = secret_key.strip().encode()
        f = Fernet(secret_key)
        return f.encrypt(str(value).encode()).decode()
    except Exception as e:
        print(f"Encryption error: {e}", file=sys.stderr)
        return None

def decrypt_secret(token, secret_key):
    """
    Decrypts a Fernet token produced by encrypt_secret.
    Returns the plain string, or None when the key or token is wrong.
    """
    try:
        if isinstance(secret_key, str):
            secret_key = secret_key.strip().encode()
        f = Fernet(secret_key)
        # Fernet expects bytes
        if isinstance(token, str):
            token = token.strip().encode()
        return f.decrypt(token).decode()
    except Exception as e:
        print(f"Decryption error: {e}", file=sys.stderr)
        return None
