import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy import and_, or_

from skillswap import db, socketio
from skillswap.auth import current_user_id
from skillswap.chat_routes import user_room
from skillswap.models import FriendRequest, User, user_summaries
from skillswap.utils import json_body

logger = logging.getLogger(__name__)

friend_bp = Blueprint('friends', __name__)


def _between(user_a, user_b):
    return or_(
        and_(FriendRequest.from_user_id == user_a, FriendRequest.to_user_id == user_b),
        and_(FriendRequest.from_user_id == user_b, FriendRequest.to_user_id == user_a),
    )


def _with_names(requests, user_key):
    names = user_summaries(getattr(r, user_key) for r in requests)
    data = []
    for friend_request in requests:
        item = friend_request.to_dict()
        item['user'] = names.get(getattr(friend_request, user_key))
        data.append(item)
    return data


@friend_bp.route('/friend-request/<int:to_user_id>', methods=['POST'])
@jwt_required()
def send_friend_request(to_user_id):
    from_user_id = current_user_id()

    if from_user_id == to_user_id:
        return jsonify({'error': "Can't send friend request to yourself"}), 400
    if not db.session.get(User, to_user_id):
        return jsonify({'error': 'User not found'}), 404

    # Check for duplicates in either direction; no unique index backs this
    if FriendRequest.query.filter(_between(from_user_id, to_user_id)).first():
        return jsonify({'error': 'Request already exists'}), 400

    friend_request = FriendRequest(from_user_id=from_user_id, to_user_id=to_user_id)
    db.session.add(friend_request)
    db.session.commit()
    logger.debug("Friend request %s sent from %s to %s", friend_request.id, from_user_id, to_user_id)

    socketio.emit('friend_request', friend_request.to_dict(), to=user_room(to_user_id))
    return jsonify({'message': 'Friend request sent', 'request': friend_request.to_dict()}), 200


@friend_bp.route('/friend-requests', methods=['GET'])
@jwt_required()
def incoming_requests():
    requests = (
        FriendRequest.query
        .filter_by(to_user_id=current_user_id(), status='pending')
        .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
        .all()
    )
    return jsonify({'requests': _with_names(requests, 'from_user_id')}), 200


@friend_bp.route('/friend-requests/sent', methods=['GET'])
@jwt_required()
def outgoing_requests():
    requests = (
        FriendRequest.query
        .filter_by(from_user_id=current_user_id(), status='pending')
        .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
        .all()
    )
    return jsonify({'requests': _with_names(requests, 'to_user_id')}), 200


@friend_bp.route('/friend-request/<int:request_id>/respond', methods=['POST'])
@jwt_required()
def respond_to_request(request_id):
    data = json_body()
    action = data.get('action')
    user_id = current_user_id()

    friend_request = db.session.get(FriendRequest, request_id)
    if not friend_request:
        return jsonify({'error': 'Request not found'}), 404
    if friend_request.to_user_id != user_id:
        return jsonify({'error': 'Not authorized to modify this request'}), 403
    if friend_request.status != 'pending':
        return jsonify({'error': f'Request already {friend_request.status}'}), 400

    if action == 'accept':
        friend_request.status = 'accepted'
    elif action == 'decline':
        friend_request.status = 'declined'
    else:
        return jsonify({'error': 'Invalid action'}), 400

    db.session.commit()
    logger.debug("Friend request %s %s by user ID %s", request_id, friend_request.status, user_id)

    socketio.emit('friend_request', friend_request.to_dict(), to=user_room(friend_request.from_user_id))
    return jsonify({'message': f'Request {friend_request.status}'}), 200


@friend_bp.route('/friends', methods=['GET'])
@jwt_required()
def list_friends():
    user_id = current_user_id()
    accepted = FriendRequest.query.filter(
        FriendRequest.status == 'accepted',
        or_(FriendRequest.from_user_id == user_id, FriendRequest.to_user_id == user_id),
    ).all()

    friend_ids = [friend_request.counterpart(user_id) for friend_request in accepted]
    names = user_summaries(friend_ids)
    friends = [names[friend_id] for friend_id in sorted(set(friend_ids)) if friend_id in names]
    return jsonify({'friends': friends}), 200


@friend_bp.route('/friends/<int:friend_id>', methods=['DELETE'])
@jwt_required()
def remove_friend(friend_id):
    friend_request = FriendRequest.query.filter(
        _between(current_user_id(), friend_id),
        FriendRequest.status == 'accepted',
    ).first()
    if not friend_request:
        return jsonify({'error': 'Friend not found'}), 404

    db.session.delete(friend_request)
    db.session.commit()
    return jsonify({'success': True}), 200
