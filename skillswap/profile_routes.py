import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy import or_

from skillswap import db
from skillswap.auth import current_user_id
from skillswap.models import Skill, User
from skillswap.utils import json_body, text_field

logger = logging.getLogger(__name__)

profile_bp = Blueprint('profile', __name__)

USER_SEARCH_LIMIT = 20


def _profile_data(user):
    skills = Skill.query.filter_by(user_id=user.id).order_by(Skill.id).all()
    data = user.summary()
    data['offers'] = [skill.name for skill in skills if skill.type == 'offer']
    data['needs'] = [skill.name for skill in skills if skill.type == 'need']
    return data


def _like_pattern(text):
    escaped = text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


@profile_bp.route('/me', methods=['GET'])
@jwt_required()
def view_profile():
    user = db.session.get(User, current_user_id())
    if not user:
        return jsonify({'error': 'User not found'}), 404

    data = _profile_data(user)
    data['Login'] = user.login
    data['verified'] = user.verified
    return jsonify(data), 200


@profile_bp.route('/update-name', methods=['POST'])
@jwt_required()
def update_name():
    data = json_body()
    first_name = text_field(data, 'firstName')
    last_name = text_field(data, 'lastName')

    if not first_name or not last_name:
        return jsonify({'error': 'Both first and last name are required.'}), 400

    user = db.session.get(User, current_user_id())
    if not user:
        return jsonify({'error': 'User not found'}), 404

    user.first_name = first_name
    user.last_name = last_name
    db.session.commit()
    logger.debug("Updated name for user ID %s", user.id)

    return jsonify({'message': 'Name updated successfully', 'firstName': first_name, 'lastName': last_name}), 200


@profile_bp.route('/users', methods=['GET'])
@jwt_required()
def search_users():
    """
    Find verified users by first name, last name or full name, excluding the caller.
    """
    name = (request.args.get('name') or '').strip()
    if not name:
        return jsonify({'users': []}), 200

    pattern = _like_pattern(name)
    full_name = User.first_name + ' ' + User.last_name
    users = (
        User.query
        .filter(
            User.id != current_user_id(),
            User.verified.is_(True),
            or_(
                User.first_name.ilike(pattern, escape='\\'),
                User.last_name.ilike(pattern, escape='\\'),
                full_name.ilike(pattern, escape='\\'),
            ),
        )
        .order_by(User.first_name, User.last_name, User.id)
        .limit(USER_SEARCH_LIMIT)
        .all()
    )

    logger.debug("User search %r returned %d users", name, len(users))
    return jsonify({'users': [user.summary() for user in users]}), 200


@profile_bp.route('/users/<int:user_id>', methods=['GET'])
@jwt_required()
def get_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404

    return jsonify(_profile_data(user)), 200
