from cryptography.fernet import Fernet
import getpass
import sys
from utils import encrypt_secret

def main():
    # 1. Generate a Key
    key = Fernet.generate_key().decode()

    # 2. Password from argv, or prompt for it
    if len(sys.argv) > 1:
        password = sys.argv[1]
    else:
        password = getpass.getpass("MySQL password: ")

    # 3. Encrypt the password
    token = encrypt_secret(password, key)

    print(f"SECRET_KEY={key}")
    print(f"MYSQL_PASSWORD_ENC={token}")

    print("\n--- Usage Instructions ---", file=sys.stderr)
    print("1. Put both lines in your .env (or export them).", file=sys.stderr)
    print("2. Leave MYSQL_PASSWORD unset, it takes precedence over MYSQL_PASSWORD_ENC.", file=sys.stderr)

if __name__ == "__main__":
    main()
