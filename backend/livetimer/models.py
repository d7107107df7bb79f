from livetimer import db, bcrypt
from flask_login import UserMixin
import secrets
import time


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_session_token() -> str:
    return secrets.token_urlsafe(16)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    sessions = db.relationship('AuthSession', back_populates='user', lazy='dynamic')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class AuthSession(db.Model):
    __tablename__ = 'session'
    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True, default=new_session_token)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.Float, nullable=False, default=time.time)  # unix seconds
    user = db.relationship('User', back_populates='sessions')

    def is_expired(self, max_age_sec: int) -> bool:
        if not max_age_sec or max_age_sec <= 0:
            return False
        return time.time() - float(self.created_at or 0) > max_age_sec


class Timer(db.Model):
    __tablename__ = 'timer'
    id = db.Column(db.Integer, primary_key=True)
    owner_username = db.Column(db.String(64), nullable=False, index=True)
    start = db.Column(db.BigInteger, nullable=False, default=now_ms)  # epoch ms
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    progress = db.Column(db.BigInteger, default=0, nullable=False)  # ms counted by ticks
    end = db.Column(db.BigInteger, nullable=True)  # epoch ms, set once on stop
    duration = db.Column(db.BigInteger, nullable=True)  # ms, set once on stop

    @classmethod
    def for_owner(cls, username, is_active=None):
        query = cls.query.filter_by(owner_username=username)
        if is_active is not None:
            query = query.filter_by(is_active=bool(is_active))
        return query.order_by(cls.start.desc(), cls.id.desc()).all()

    def stop(self, at=None) -> bool:
        """Finish the timer. Returns False if it was already stopped.

        end/duration are stamped exactly once; later calls leave them alone.
        """
        if not self.is_active:
            return False
        end = int(at) if at is not None else now_ms()
        self.is_active = False
        self.end = end
        self.duration = end - int(self.start)
        return True

    def to_dict(self):
        view = {
            'id': self.id,
            'name': self.owner_username,
            'start': self.start,
            'description': self.description,
            'isActive': bool(self.is_active),
            'progress': int(self.progress or 0),
        }
        if not self.is_active:
            view['end'] = self.end
            view['duration'] = self.duration
        return view
