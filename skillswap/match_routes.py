import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy import and_, func, or_

from skillswap import db
from skillswap.auth import current_user_id
from skillswap.models import FriendRequest, Message, Skill, User

logger = logging.getLogger(__name__)

match_bp = Blueprint('match', __name__)

DEFAULT_MATCH_LIMIT = 50
MAX_MATCH_LIMIT = 100


def related_user_ids(user_id):
    """
    Users the given user already has a relationship with: a pending or
    accepted friend request in either direction, or any exchanged message.
    """
    related = set()

    requests = FriendRequest.query.filter(
        FriendRequest.status.in_(('pending', 'accepted')),
        or_(FriendRequest.from_user_id == user_id, FriendRequest.to_user_id == user_id),
    ).all()
    related.update(friend_request.counterpart(user_id) for friend_request in requests)

    pairs = db.session.query(Message.from_user_id, Message.to_user_id).filter(
        or_(Message.from_user_id == user_id, Message.to_user_id == user_id)
    ).distinct().all()
    for from_id, to_id in pairs:
        related.add(to_id if from_id == user_id else from_id)

    related.discard(user_id)
    return related


def _match_limit():
    limit = request.args.get('limit', DEFAULT_MATCH_LIMIT, type=int)
    return max(1, min(limit, MAX_MATCH_LIMIT))


@match_bp.route('/matchskills', methods=['GET'])
@jwt_required()
def match_skills():
    """
    Find users whose skills complement the caller's: they offer what the
    caller needs, or need what the caller offers.
    """
    user_id = current_user_id()
    include_connected = request.args.get('include_connected', '').lower() in ('1', 'true', 'yes')

    my_skills = Skill.query.filter_by(user_id=user_id).all()
    offered = sorted({skill.name for skill in my_skills if skill.type == 'offer'})
    needed = sorted({skill.name for skill in my_skills if skill.type == 'need'})

    if not offered and not needed:
        return jsonify({'matches': []}), 200

    conditions = []
    if needed:
        conditions.append(and_(Skill.name.in_(needed), Skill.type == 'offer'))
    if offered:
        conditions.append(and_(Skill.name.in_(offered), Skill.type == 'need'))
    complementary = or_(*conditions)

    score = func.count(Skill.id)
    query = (
        db.session.query(Skill.user_id, score.label('score'))
        .join(User, User.id == Skill.user_id)
        .filter(complementary, Skill.user_id != user_id, User.verified.is_(True))
    )

    if not include_connected:
        excluded = related_user_ids(user_id)
        if excluded:
            query = query.filter(Skill.user_id.notin_(sorted(excluded)))

    grouped = (
        query.group_by(Skill.user_id)
        .order_by(score.desc(), Skill.user_id)
        .limit(_match_limit())
        .all()
    )
    if not grouped:
        logger.debug("No matches found for user ID %s.", user_id)
        return jsonify({'matches': []}), 200

    match_ids = [row.user_id for row in grouped]
    users = {user.id: user for user in User.query.filter(User.id.in_(match_ids)).all()}
    matching_skills = (
        Skill.query
        .filter(Skill.user_id.in_(match_ids), complementary)
        .order_by(Skill.id)
        .all()
    )

    skills_by_user = {match_id: [] for match_id in match_ids}
    for skill in matching_skills:
        skills_by_user[skill.user_id].append(skill)

    matches = []
    for row in grouped:
        user = users[row.user_id]
        skills = skills_by_user[row.user_id]
        matches.append({
            '_id': row.user_id,
            'firstName': user.first_name,
            'lastName': user.last_name,
            'skills': [skill.name for skill in skills],
            'theyOffer': [skill.name for skill in skills if skill.type == 'offer'],
            'theyNeed': [skill.name for skill in skills if skill.type == 'need'],
            'score': row.score,
        })

    logger.debug("Retrieved %d matches for user ID %s.", len(matches), user_id)
    return jsonify({'matches': matches}), 200
