import logging

from flask import jsonify
from flask_jwt_extended import create_access_token, decode_token, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

logger = logging.getLogger(__name__)


def generate_token(user):
    """
    Generate a JWT access token for the given user.
    """
    return create_access_token(
        identity=str(user.id),
        additional_claims={
            'userId': user.id,
            'firstName': user.first_name,
            'lastName': user.last_name,
        },
    )


def current_user_id():
    """ID of the authenticated caller; only valid inside a jwt_required view."""
    return int(get_jwt_identity())


def verify_token(token):
    """
    Decode and verify a raw JWT, returning the user ID or None.
    """
    try:
        payload = decode_token(token)
        return int(payload['sub'])
    except (PyJWTError, JWTExtendedException, KeyError, ValueError) as e:
        logger.debug("Token verification error: %s", e)
        return None


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        logger.debug("Missing token: %s", reason)
        return jsonify({'error': 'Missing token'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        logger.debug("Token verification error: %s", reason)
        return jsonify({'error': 'Invalid or expired token'}), 403

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Invalid or expired token'}), 403
