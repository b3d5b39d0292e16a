from flask import Blueprint, current_app, jsonify, request
from gameshow.errors import GameError

main = Blueprint('main', __name__)


@main.errorhandler(GameError)
def handle_game_error(exc):
    return jsonify({'error': exc.message, 'reason': exc.reason}), exc.status_code


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the game show server!'})


@main.route('/api/health')
def health():
    registry = current_app.extensions['gameshow_registry']
    return jsonify({'ok': True, 'rooms': len(registry)})


@main.route('/api/rooms/<string:code>', methods=['GET'])
def get_room_state(code):
    session = current_app.extensions['gameshow_registry'].get(code)
    with session.lock:
        return jsonify(session.to_dict())


@main.route('/api/questions/<string:qtype>', methods=['GET'])
def get_questions(qtype):
    count = request.args.get('count', type=int)
    bank = current_app.extensions['question_bank']
    return jsonify({'ok': True, 'questions': bank.get_questions(qtype, count)})
