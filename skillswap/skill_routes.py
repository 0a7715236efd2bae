import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from skillswap import db
from skillswap.auth import current_user_id
from skillswap.models import SKILL_TYPES, Skill
from skillswap.utils import json_body, text_field

logger = logging.getLogger(__name__)

skill_bp = Blueprint('skills', __name__)


@skill_bp.route('/addskill', methods=['POST'])
@jwt_required()
def add_skill():
    data = json_body()
    name = text_field(data, 'card')
    skill_type = data.get('type') or 'offer'
    user_id = current_user_id()

    if not name:
        return jsonify({'error': 'Skill name is required'}), 400
    if skill_type not in SKILL_TYPES:
        return jsonify({'error': "Skill type must be 'offer' or 'need'"}), 400

    # Duplicates are checked before insert; there is no unique index behind it
    if Skill.query.filter_by(user_id=user_id, name=name, type=skill_type).first():
        return jsonify({'error': 'Skill already added'}), 400

    skill = Skill(
        name=name,
        user_id=user_id,
        type=skill_type,
        category=text_field(data, 'category') or None,
        description=text_field(data, 'description') or None,
    )
    db.session.add(skill)
    db.session.commit()
    logger.debug("User ID %s added %s skill %r", user_id, skill_type, name)

    return jsonify({'message': 'Skill added successfully', 'skill': skill.to_dict()}), 200


@skill_bp.route('/browseskills', methods=['GET'])
def browse_skills():
    skills = Skill.query.order_by(Skill.id).all()
    return jsonify({'skills': [skill.to_dict() for skill in skills]}), 200


@skill_bp.route('/myskills', methods=['GET'])
@jwt_required()
def my_skills():
    skills = Skill.query.filter_by(user_id=current_user_id()).order_by(Skill.id).all()
    return jsonify({'mySkills': [skill.to_dict() for skill in skills]}), 200


@skill_bp.route('/deleteskill/<skill_name>', methods=['DELETE'])
@jwt_required()
def delete_skill(skill_name):
    query = Skill.query.filter_by(name=skill_name, user_id=current_user_id())
    skill_type = request.args.get('type')
    if skill_type:
        if skill_type not in SKILL_TYPES:
            return jsonify({'error': "Skill type must be 'offer' or 'need'"}), 400
        query = query.filter_by(type=skill_type)

    skill = query.order_by(Skill.id).first()
    if skill:
        db.session.delete(skill)
        db.session.commit()
        logger.debug("Deleted skill %r for user ID %s", skill_name, skill.user_id)

    return jsonify({'success': True}), 200


@skill_bp.route('/searchskills', methods=['POST'])
def search_skills():
    data = json_body()
    search = text_field(data, 'search')

    escaped = search.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    results = (
        Skill.query
        .filter(Skill.name.ilike(f'%{escaped}%', escape='\\'))
        .order_by(Skill.name, Skill.id)
        .all()
    )
    return jsonify({'results': [skill.to_dict() for skill in results], 'error': ''}), 200
