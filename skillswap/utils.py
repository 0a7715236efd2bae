import secrets

from flask import request

from skillswap import bcrypt


def hash_password(password):
    return bcrypt.generate_password_hash(password).decode('utf-8')


def check_password(password_hash, password):
    if not password_hash or not isinstance(password, str):
        return False
    return bcrypt.check_password_hash(password_hash, password)


def new_token():
    """Random 32-byte hex token for email verification and password reset links."""
    return secrets.token_hex(32)


def parse_int(value):
    """Return value as an int, or None when it is not an integral number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    return None


def text_field(data, key):
    """Stripped string value of a JSON field; anything that is not a string reads as ''."""
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ''


def json_body():
    """Request JSON object, or {} when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
