import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required
from flask_socketio import emit, join_room, leave_room
from sqlalchemy import case, func, or_

from skillswap import db, socketio
from skillswap.auth import current_user_id, verify_token
from skillswap.models import Message, User, user_summaries
from skillswap.utils import json_body, parse_int

logger = logging.getLogger(__name__)

chat_bp = Blueprint('chat', __name__)


def user_room(user_id):
    return f'user_{user_id}'


def _involving(user_id):
    return or_(Message.from_user_id == user_id, Message.to_user_id == user_id)


@chat_bp.route('/messages', methods=['POST'])
@jwt_required()
def send_message():
    data = json_body()
    sender_id = current_user_id()
    receiver_id = parse_int(data.get('to'))
    body = data.get('body')

    if receiver_id is None:
        return jsonify({'error': 'Recipient user ID is required'}), 400
    if receiver_id == sender_id:
        return jsonify({'error': "Can't send a message to yourself"}), 400
    if not isinstance(body, str) or not body.strip():
        return jsonify({'error': 'Message body is required'}), 400
    if not db.session.get(User, receiver_id):
        return jsonify({'error': 'Recipient not found'}), 404

    message = Message(from_user_id=sender_id, to_user_id=receiver_id, body=body)
    db.session.add(message)
    db.session.commit()
    logger.debug("Message saved to database from %s to %s", sender_id, receiver_id)

    payload = message.to_dict()
    socketio.emit('message', payload, to=user_room(receiver_id))
    logger.debug("Message broadcasted to room: %s", user_room(receiver_id))

    return jsonify({'success': True, 'message': payload}), 200


@chat_bp.route('/messages', methods=['GET'])
@jwt_required()
def get_messages():
    messages = (
        Message.query
        .filter(_involving(current_user_id()))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )
    return jsonify({'messages': [message.to_dict() for message in messages]}), 200


@chat_bp.route('/messages/threads', methods=['GET'])
@jwt_required()
def get_threads():
    """
    One row per conversation partner, most recently active first.
    """
    user_id = current_user_id()
    partner = case((Message.from_user_id == user_id, Message.to_user_id), else_=Message.from_user_id)
    last_activity = func.max(Message.created_at)

    rows = (
        db.session.query(partner.label('partner_id'), func.count(Message.id).label('count'), last_activity)
        .filter(_involving(user_id))
        .group_by('partner_id')
        .order_by(last_activity.desc(), 'partner_id')
        .all()
    )
    if not rows:
        return jsonify({'threads': []}), 200

    # Newest message per partner
    latest = {}
    for message in Message.query.filter(_involving(user_id)).order_by(Message.created_at.desc(), Message.id.desc()):
        latest.setdefault(message.counterpart(user_id), message)

    names = user_summaries(row.partner_id for row in rows)
    threads = []
    for row in rows:
        summary = names.get(row.partner_id, {})
        threads.append({
            'partnerId': row.partner_id,
            'firstName': summary.get('FirstName'),
            'lastName': summary.get('LastName'),
            'count': row.count,
            'lastMessage': latest[row.partner_id].to_dict(),
        })

    return jsonify({'threads': threads}), 200


@chat_bp.route('/messages/with/<int:partner_id>', methods=['GET'])
@jwt_required()
def get_conversation(partner_id):
    user_id = current_user_id()
    logger.debug("Fetching chat history: user_id=%s, partner_id=%s", user_id, partner_id)

    messages = (
        Message.query
        .filter(or_(
            (Message.from_user_id == user_id) & (Message.to_user_id == partner_id),
            (Message.from_user_id == partner_id) & (Message.to_user_id == user_id),
        ))
        .order_by(Message.created_at, Message.id)
        .all()
    )
    return jsonify({'messages': [message.to_dict() for message in messages]}), 200


@chat_bp.route('/messages/<int:message_id>', methods=['DELETE'])
@jwt_required()
def delete_message(message_id):
    message = db.session.get(Message, message_id)
    if not message:
        return jsonify({'error': 'Message not found'}), 404
    if message.from_user_id != current_user_id():
        return jsonify({'error': 'Not authorized to delete this message'}), 403

    db.session.delete(message)
    db.session.commit()
    return jsonify({'success': True}), 200


# WebSocket events for real-time delivery
def handle_join(data):
    token = data.get('token') if isinstance(data, dict) else None
    user_id = verify_token(token) if token else None
    if not user_id:
        emit('error', {'error': 'Invalid or expired token'})
        return

    room = user_room(user_id)
    join_room(room)
    logger.debug("User %s joined room: %s", user_id, room)
    emit('status', {'message': f"User joined room: {room}"}, to=room)


def handle_leave(data):
    token = data.get('token') if isinstance(data, dict) else None
    user_id = verify_token(token) if token else None
    if not user_id:
        emit('error', {'error': 'Invalid or expired token'})
        return

    room = user_room(user_id)
    leave_room(room)
    logger.debug("User %s left room: %s", user_id, room)
    emit('status', {'message': f"User {user_id} has left the room."})


def register_socket_handlers(server):
    """Attach the room events to the server created by the latest init_app call."""
    server.on_event('join', handle_join)
    server.on_event('leave', handle_leave)
