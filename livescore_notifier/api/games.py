from flask import Blueprint, jsonify

from ..errors import GameSourceError
from ..utils.logger import setup_logger
from . import get_components, no_cache

logger = setup_logger(__name__)

games = Blueprint('games', __name__)

# One delivery attempt per channel, with no backoff sleep, on the read path
READ_PATH_MAX_RETRIES = 1


@games.route('/health')
def health():
    config = get_components().config
    return jsonify({'ok': True, 'companyId': config.default_company_id})


@games.route('/games/today')
def today_games():
    """Today's scoreboard; also gives the notification batch a chance to run"""
    components = get_components()
    try:
        game_states = components.game_source.fetch_today_games()
    except GameSourceError as e:
        logger.warning(f"Failed to fetch today's games: {e}")
        game_states = []

    try:
        components.notification_service.process_game_notifications(max_retries=READ_PATH_MAX_RETRIES)
    except Exception as e:
        logger.error(f"Opportunistic notification run failed: {e}")

    return no_cache(jsonify({'games': [game.to_dict() for game in game_states]}))


@games.route('/games/<string:game_id>')
def game_detail(game_id):
    try:
        game = get_components().game_source.fetch_game_state(game_id)
    except GameSourceError as e:
        logger.warning(f"Failed to fetch game {game_id}: {e}")
        return jsonify({'error': str(e)}), 502
    return no_cache(jsonify({'game': game.to_dict()}))
