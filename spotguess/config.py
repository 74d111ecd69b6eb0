import os

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of frontend origins allowed to talk to the server
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
    # Round defaults used when the admin leaves a field empty
    DEFAULT_IMAGE_URL = os.environ.get('DEFAULT_IMAGE_URL', '/images/sample.jpg')
    DEFAULT_ROUND_DURATION_SEC = int(os.environ.get('DEFAULT_ROUND_DURATION_SEC', '15'))
    DEFAULT_RADIUS_PX = int(os.environ.get('DEFAULT_RADIUS_PX', '45'))
    DEFAULT_TARGET_X = float(os.environ.get('DEFAULT_TARGET_X', '100'))
    DEFAULT_TARGET_Y = float(os.environ.get('DEFAULT_TARGET_Y', '100'))
    # Post-reveal auto-advance timings (ms)
    AUTO_NEXT_DEFAULT_DELAY_MS = int(os.environ.get('AUTO_NEXT_DEFAULT_DELAY_MS', '3000'))
    SHOW_FULL_MAX_DELAY_MS = int(os.environ.get('SHOW_FULL_MAX_DELAY_MS', '5000'))
    REQUEST_NEXT_MIN_DELAY_MS = int(os.environ.get('REQUEST_NEXT_MIN_DELAY_MS', '1500'))
    REQUEST_NEXT_BUFFER_MS = int(os.environ.get('REQUEST_NEXT_BUFFER_MS', '2000'))
    # Image uploads
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'public', 'uploads')
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', str(25 * 1024 * 1024)))
    # Timers run only in real deployments unless explicitly enabled in tests
    ENABLE_SCHEDULER_IN_TESTS = False
