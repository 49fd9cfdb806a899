from flask import Blueprint, jsonify, request

from ..services.test_games import available_test_games
from ..utils.logger import setup_logger
from . import get_components, resolve_company_id

logger = setup_logger(__name__)

testing = Blueprint('testing', __name__)


@testing.route('/games')
def list_test_games():
    return jsonify({'games': available_test_games()})


@testing.route('/start-game', methods=['POST'])
def start_game():
    data = request.get_json(silent=True) or {}
    company_id = resolve_company_id(data.get('companyId'))
    if not company_id:
        return jsonify({'error': 'companyId is required'}), 400

    game_key = data.get('gameKey') or 'lakers-celtics'
    try:
        session = get_components().test_games.start_game(company_id, game_key)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({'success': True, 'session': session.to_dict()})


@testing.route('/stop-game', methods=['POST'])
def stop_game():
    data = request.get_json(silent=True) or {}
    company_id = resolve_company_id(data.get('companyId'))
    if not company_id:
        return jsonify({'error': 'companyId is required'}), 400

    get_components().test_games.stop_game(company_id)
    return jsonify({'success': True})


@testing.route('/status')
def status():
    company_id = resolve_company_id(request.args.get('company_id'))
    if not company_id:
        return jsonify({'error': 'company_id is required'}), 400

    test_games = get_components().test_games
    session = test_games.get_active_session(company_id)
    if session is None:
        return jsonify({'isActive': False, 'session': None, 'currentState': None})

    return jsonify({
        'isActive': True,
        'session': session.to_dict(),
        'currentState': test_games.to_game_state(session).to_dict(),
    })
