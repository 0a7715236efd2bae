import logging
from datetime import datetime, timedelta

from flask import Blueprint, current_app, jsonify, request
from markupsafe import escape

from skillswap import db
from skillswap.auth import generate_token
from skillswap.mailer import MailError, send_reset_email, send_verification_email
from skillswap.models import User
from skillswap.utils import check_password, hash_password, json_body, new_token, text_field

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

PAGE = """
<html><body style="font-family:sans-serif;text-align:center;margin-top:10%;">
  {content}
</body></html>
"""


def _page(content, status=200):
    return PAGE.format(content=content), status, {'Content-Type': 'text/html; charset=utf-8'}


@auth_bp.route('/register', methods=['POST'])
def register():
    data = json_body()
    first_name = text_field(data, 'firstName')
    last_name = text_field(data, 'lastName')
    login = text_field(data, 'login')
    password = data.get('password')

    if not first_name or not last_name or not login or not password:
        return jsonify({'error': 'firstName, lastName, login and password are required'}), 400
    if not isinstance(password, str):
        return jsonify({'error': 'password must be a string'}), 400

    # Check if the user already exists
    if User.query.filter_by(login=login).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(
        first_name=first_name,
        last_name=last_name,
        login=login,
        password_hash=hash_password(password),
        verification_token=new_token(),
        verified=False,
    )
    db.session.add(user)
    db.session.commit()
    logger.debug("Registered user ID %s (%s)", user.id, login)

    try:
        send_verification_email(user)
    except MailError as e:
        logger.error("Failed to send verification email to %s: %s", login, e)
        return jsonify({'error': 'Failed to send verification email.'}), 500

    return jsonify({'message': 'Verification email sent. Please verify before logging in.'}), 200


@auth_bp.route('/resend-verification', methods=['POST'])
def resend_verification():
    data = json_body()
    login = text_field(data, 'login')

    user = User.query.filter_by(login=login).first() if login else None
    if not user:
        return jsonify({'error': 'No user found with that email'}), 400
    if user.verified:
        return jsonify({'error': 'Account already verified'}), 400

    user.verification_token = new_token()
    db.session.commit()

    try:
        send_verification_email(user)
    except MailError as e:
        logger.error("Failed to resend verification email to %s: %s", login, e)
        return jsonify({'error': 'Failed to send verification email.'}), 500

    return jsonify({'message': 'Verification email sent.'}), 200


@auth_bp.route('/verify/<token>', methods=['GET'])
def verify_email(token):
    user = User.query.filter_by(verification_token=token).first()
    if not user:
        logger.debug("Invalid or expired verification token")
        return _page('<h2 style="color:red;">Invalid or expired verification link.</h2>', 400)

    if not user.verified:
        user.verified = True
        user.verification_token = None
        db.session.commit()
        logger.info("User ID %s verified", user.id)

    return _page(
        '<h2 style="color:green;">Email verified successfully!</h2>'
        '<p>You can now log in to SkillSwap.</p>'
        '<a href="/" style="color:white;background:#4CAF50;padding:10px 20px;'
        'border-radius:5px;text-decoration:none;">Go to Login</a>'
    )


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    login = text_field(data, 'login')
    password = data.get('password')

    user = User.query.filter_by(login=login).first() if login else None
    if not user or not check_password(user.password_hash, password):
        return jsonify({'error': 'Invalid username or password'}), 400

    if not user.verified:
        return jsonify({'error': 'Please verify your email before logging in.'}), 403

    return jsonify({
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'token': generate_token(user),
        'error': '',
    }), 200


@auth_bp.route('/request-reset', methods=['POST'])
def request_reset():
    data = json_body()
    login = text_field(data, 'login')

    user = User.query.filter_by(login=login).first() if login else None
    if not user:
        return jsonify({'error': 'No user found with that email'}), 400

    minutes = current_app.config['RESET_TOKEN_MINUTES']
    user.reset_token = new_token()
    user.reset_token_expires = datetime.utcnow() + timedelta(minutes=minutes)
    db.session.commit()

    try:
        send_reset_email(user)
    except MailError as e:
        logger.error("Reset request error: %s", e)
        return jsonify({'error': 'Error sending reset email'}), 500

    return jsonify({'message': 'Password reset email sent successfully'}), 200


@auth_bp.route('/reset-password/<token>', methods=['POST'])
def reset_password(token):
    data = json_body()
    password = data.get('password')

    user = User.query.filter(
        User.reset_token == token,
        User.reset_token_expires > datetime.utcnow(),
    ).first()
    if not user:
        return _page('<h2>Invalid or expired reset link</h2>', 400)

    if not password or not isinstance(password, str):
        return _page('<h2>A new password is required</h2>', 400)

    user.password_hash = hash_password(password)
    user.reset_token = None
    user.reset_token_expires = None
    db.session.commit()
    logger.info("Password reset for user ID %s", user.id)

    return _page(
        '<h2>Password reset successful!</h2>'
        f'<p>You can now log in with your new password, {escape(user.first_name)}.</p>'
    )
