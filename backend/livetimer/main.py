from flask import Blueprint, redirect, render_template, request, url_for, jsonify, current_app
from flask_login import current_user
from livetimer import db
from livetimer.auth import close_session, open_session, token_cookie_name, token_from_request
from livetimer.errors import AuthError, ConflictError, ValidationError
from livetimer.models import Timer, User

main = Blueprint('main', __name__)

AUTH_ERROR_MESSAGE = 'Wrong username or password'


@main.route('/')
def index():
    auth_error = request.args.get('authError')
    if auth_error == 'true':
        auth_error = AUTH_ERROR_MESSAGE
    user = current_user if current_user.is_authenticated else None
    finished = Timer.for_owner(user.username, is_active=False) if user else []
    return render_template('index.html', user=user, authError=auth_error, finished=finished)


@main.route('/signup', methods=['POST'])
def signup():
    username = request.form.get('username')
    password = request.form.get('password')
    if not username or not password:
        raise ValidationError('Missing username or password')

    if User.query.filter_by(username=username).first():
        raise ConflictError('Username already exists')

    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"[signup] user={username}")
    return jsonify({'message': 'User created successfully'}), 201


@main.route('/login', methods=['POST'])
def login():
    username = request.form.get('username')
    password = request.form.get('password')
    if not username or not password:
        return redirect(url_for('main.index', authError='true'))

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        raise AuthError(AUTH_ERROR_MESSAGE)

    token = open_session(user)
    current_app.logger.info(f"[login] user={username}")
    response = redirect(url_for('main.index'))
    response.set_cookie(token_cookie_name(), token, httponly=True, samesite='Lax')
    return response


@main.route('/logout')
def logout():
    if close_session(token_from_request()):
        current_app.logger.info("[logout] session closed")
    response = redirect(url_for('main.index'))
    response.delete_cookie(token_cookie_name())
    return response
