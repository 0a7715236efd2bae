from datetime import datetime

from skillswap import db

SKILL_TYPES = ('offer', 'need')
REQUEST_STATUSES = ('pending', 'accepted', 'declined')


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False, default='')
    last_name = db.Column(db.String(100), nullable=False, default='')
    login = db.Column(db.String(255), nullable=False, unique=True)
    password_hash = db.Column(db.Text, nullable=False)

    # Email verification
    verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_token = db.Column(db.String(64), index=True)

    # Password reset
    reset_token = db.Column(db.String(64), index=True)
    reset_token_expires = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def summary(self):
        return {
            'UserID': self.id,
            'FirstName': self.first_name,
            'LastName': self.last_name,
        }

    def to_dict(self):
        data = self.summary()
        data.update({
            'Login': self.login,
            'verified': self.verified,
        })
        return data


class Skill(db.Model):
    __tablename__ = 'skills'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    type = db.Column(db.String(10), nullable=False, default='offer')
    category = db.Column(db.String(100))
    description = db.Column(db.Text)

    def to_dict(self):
        return {
            '_id': self.id,
            'SkillName': self.name,
            'UserId': self.user_id,
            'Type': self.type,
            'Category': self.category,
            'Description': self.description,
        }


class Message(db.Model):
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    from_user_id = db.Column(db.Integer, nullable=False, index=True)
    to_user_id = db.Column(db.Integer, nullable=False, index=True)
    body = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def counterpart(self, user_id):
        return self.to_user_id if self.from_user_id == user_id else self.from_user_id

    def to_dict(self):
        return {
            '_id': self.id,
            'from': self.from_user_id,
            'to': self.to_user_id,
            'body': self.body,
            'createdAt': self.created_at.isoformat(),
        }


class FriendRequest(db.Model):
    __tablename__ = 'friend_requests'

    id = db.Column(db.Integer, primary_key=True)
    from_user_id = db.Column(db.Integer, nullable=False, index=True)
    to_user_id = db.Column(db.Integer, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default='pending')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def counterpart(self, user_id):
        return self.to_user_id if self.from_user_id == user_id else self.from_user_id

    def to_dict(self):
        return {
            '_id': self.id,
            'fromUserId': self.from_user_id,
            'toUserId': self.to_user_id,
            'status': self.status,
            'createdAt': self.created_at.isoformat(),
        }


def user_summaries(user_ids):
    """Map user ID to the public name fields for each user that still exists."""
    user_ids = set(user_ids)
    if not user_ids:
        return {}
    users = User.query.filter(User.id.in_(user_ids)).all()
    return {user.id: user.summary() for user in users}
