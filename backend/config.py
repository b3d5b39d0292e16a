import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of browser origins allowed to talk to the server
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Question timers (seconds)
    ANSWER_WINDOW_SEC = int(os.environ.get('ANSWER_WINDOW_SEC', '30'))
    DEFAULT_ROUND_DURATION_SEC = int(os.environ.get('DEFAULT_ROUND_DURATION_SEC', '15'))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '0.5'))
    # Scoring
    CORRECT_ANSWER_POINTS = int(os.environ.get('CORRECT_ANSWER_POINTS', '10'))
    # Points offered for each successive sequence reveal
    SEQUENCE_POINTS = os.environ.get('SEQUENCE_POINTS', '50,30,20,10')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    # Empty means the bundled gameshow/data/questions.json
    QUESTION_BANK_PATH = os.environ.get('QUESTION_BANK_PATH') or None
    # Ticker background loops are off under TESTING unless this is set
    ENABLE_TICKER_IN_TESTS = False
