from flask import Blueprint, current_app, jsonify

game = Blueprint('game', __name__)


@game.route('/state', methods=['GET'])
def get_state():
    """Teams, players, turn and the current round config."""
    return jsonify(current_app.extensions['game_session'].snapshot())


@game.route('/history', methods=['GET'])
def get_history():
    return jsonify(current_app.extensions['game_session'].history.to_list())
