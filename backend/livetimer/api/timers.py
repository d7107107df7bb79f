from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from livetimer import db
from livetimer.errors import NotFoundError, ValidationError
from livetimer.models import Timer, now_ms

timers = Blueprint('timers', __name__)

MAX_TIMER_ID = 2 ** 63 - 1


def _parse_active_flag(raw):
    """None -> every timer; 'true' -> running ones; anything else -> finished ones."""
    if raw is None:
        return None
    return raw == 'true'


@timers.route('', methods=['GET'])
@login_required
def list_timers():
    is_active = _parse_active_flag(request.args.get('isActive'))
    owned = Timer.for_owner(current_user.username, is_active=is_active)
    return jsonify([timer.to_dict() for timer in owned])


@timers.route('', methods=['POST'])
@login_required
def create_timer():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError('Timer body must be a JSON object')
    description = data.get('description')
    timer = Timer(
        owner_username=current_user.username,
        start=now_ms(),
        description=description,
        is_active=True,
        progress=0,
    )
    db.session.add(timer)
    db.session.commit()
    current_app.logger.info(f"[timer-start] id={timer.id} user={current_user.username}")
    return jsonify(timer.to_dict()), 201


@timers.route('/<string:timer_id>/stop', methods=['POST'])
@login_required
def stop_timer(timer_id):
    timer = None
    try:
        numeric_id = int(timer_id)
    except ValueError:
        numeric_id = None
    # Ids outside the column range can never resolve
    if numeric_id is not None and 0 < numeric_id <= MAX_TIMER_ID:
        timer = db.session.get(Timer, numeric_id)
    if timer is None:
        raise NotFoundError(f'Unknown timer ID: {timer_id}')
    # Ownership is only checked when explicitly enabled
    if current_app.config.get('ENFORCE_TIMER_OWNERSHIP') and timer.owner_username != current_user.username:
        raise NotFoundError(f'Unknown timer ID: {timer_id}')

    if timer.stop():
        db.session.commit()
        current_app.logger.info(f"[timer-stop] id={timer.id} duration={timer.duration}ms progress={timer.progress}ms")
    else:
        current_app.logger.info(f"[timer-stop] id={timer.id} already stopped")
    return '', 204
