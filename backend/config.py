import os


def _env_flag(name, default):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///livetimer.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Browser origins allowed for API and Socket.IO (comma separated)
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
    ).split(',') if o.strip()]
    PORT = int(os.environ.get('PORT', '3000'))
    # Same cost as the 10 salt rounds the Node service used
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '10'))
    # Cookie carrying the opaque session token
    SESSION_TOKEN_COOKIE = os.environ.get('SESSION_TOKEN_COOKIE', 'sessionId')
    # Session lifetime (sec). 0 keeps sessions valid until logout.
    SESSION_MAX_AGE_SEC = int(os.environ.get('SESSION_MAX_AGE_SEC', '0'))
    # Off: any logged-in user may stop any timer by id
    ENFORCE_TIMER_OWNERSHIP = _env_flag('ENFORCE_TIMER_OWNERSHIP', 'false')
    # Progress tick (ms added to every active timer per tick)
    TICK_INTERVAL_MS = int(os.environ.get('TICK_INTERVAL_MS', '1000'))
    TICKER_ENABLED = _env_flag('TICKER_ENABLED', 'true')
