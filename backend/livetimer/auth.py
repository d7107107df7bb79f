from typing import Optional

from flask import current_app, jsonify, request

from livetimer import db, login_manager
from livetimer.models import AuthSession, User


def token_cookie_name() -> str:
    return current_app.config.get('SESSION_TOKEN_COOKIE', 'sessionId')


def token_from_request(req=None) -> Optional[str]:
    req = req or request
    return req.cookies.get(token_cookie_name()) or None


def resolve(token: Optional[str]) -> Optional[User]:
    """Map an opaque session token to its user.

    A missing token, an unknown token, an expired session (only when
    SESSION_MAX_AGE_SEC is set) or a session whose user row is gone all
    resolve to None.
    """
    if not token:
        return None
    session = AuthSession.query.filter_by(token=token).first()
    if session is None:
        return None
    if session.is_expired(current_app.config.get('SESSION_MAX_AGE_SEC', 0)):
        current_app.logger.info(f"[session-expired] user_id={session.user_id}")
        return None
    return db.session.get(User, session.user_id)


def open_session(user: User) -> str:
    session = AuthSession(user_id=user.id)
    db.session.add(session)
    db.session.commit()
    return session.token


def close_session(token: Optional[str]) -> bool:
    if not token:
        return False
    deleted = AuthSession.query.filter_by(token=token).delete()
    db.session.commit()
    return deleted > 0


@login_manager.request_loader
def load_user_from_request(req):
    return resolve(token_from_request(req))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': 'Unauthorized'}), 401
