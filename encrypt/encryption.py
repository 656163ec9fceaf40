# encryption.py
from cryptography.fernet import Fernet, InvalidToken
import os
from dotenv import load_dotenv
load_dotenv()


# Must be set in .env
ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY")

if not ENCRYPTION_KEY:
    raise ValueError("ENCRYPTION_KEY not set in environment. Generate one with Fernet.generate_key()")

fernet = Fernet(ENCRYPTION_KEY.encode())


def encrypt_field(value: str) -> str:
    if value is None:
        return None
    return fernet.encrypt(value.encode()).decode()


def decrypt_field(value: str) -> str:
    if value is None:
        return None
    return fernet.decrypt(value.encode()).decode()


def safe_decrypt_field(encrypted_value: str) -> str:
    """
    Decrypt a field, returning the original value if it is not a Fernet token.
    Older patient profiles were stored before encryption was switched on.
    """
    if encrypted_value is None:
        return None

    if not isinstance(encrypted_value, str):
        return encrypted_value

    try:
        return decrypt_field(encrypted_value)
    except (InvalidToken, ValueError):
        return encrypted_value


def encrypt_fields(document: dict, fields) -> dict:
    """Encrypt the named top-level string fields of a document copy."""
    encrypted = dict(document)
    for field in fields:
        if isinstance(encrypted.get(field), str):
            encrypted[field] = encrypt_field(encrypted[field])
    return encrypted


def decrypt_fields(document: dict, fields) -> dict:
    decrypted = dict(document)
    for field in fields:
        if field in decrypted:
            decrypted[field] = safe_decrypt_field(decrypted[field])
    return decrypted
