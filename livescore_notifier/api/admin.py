from flask import Blueprint, jsonify, request

from ..errors import WhopAPIError
from ..services.message_formatter import format_game_update_message
from ..storage.models import EventKind, GameState, GameStatus
from ..utils.logger import setup_logger
from ..utils.signing import verify_admin_session_token
from . import get_components, resolve_company_id

logger = setup_logger(__name__)

admin = Blueprint('admin', __name__)


def _to_int(value, default=0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@admin.route('/notifications', methods=['GET'])
def get_notification_settings():
    company_id = resolve_company_id(request.args.get('company_id'))
    if not company_id:
        return jsonify({'error': 'company_id is required'}), 400

    settings = get_components().settings_service.get_settings(company_id)
    return jsonify({'settings': settings.to_dict()})


@admin.route('/notifications', methods=['POST'])
def update_notification_settings():
    data = request.get_json(silent=True) or {}
    settings = get_components().settings_service.update_settings(data)
    return jsonify({'settings': settings.to_dict()})


@admin.route('/channels', methods=['GET'])
def list_channels():
    company_id = resolve_company_id(request.args.get('company_id'))
    if not company_id:
        return jsonify({'error': 'company_id is required'}), 400

    try:
        channels = get_components().whop_client.list_chat_channels(company_id)
    except WhopAPIError as e:
        logger.error(f"Error listing chat channels for company {company_id}: {e}")
        return jsonify({'error': str(e)}), 502

    return jsonify({'channels': channels})


@admin.route('/notifications/simulate', methods=['POST'])
def simulate_notification():
    """Post a made-up game update of the requested kind to the company's channels"""
    components = get_components()
    data = request.get_json(silent=True) or {}

    company_id = str(data.get('companyId') or '').strip()
    if not company_id:
        return jsonify({'error': 'companyId is required'}), 400

    try:
        kind = EventKind(data.get('eventType'))
    except ValueError:
        return jsonify({'error': 'eventType must be one of: ' + ', '.join(k.value for k in EventKind)}), 400

    token = request.headers.get('X-CP-Admin') or request.cookies.get('CP_ADMIN')
    valid, token_company = verify_admin_session_token(token, components.config.whop_app_secret)
    if not valid or token_company != company_id:
        return jsonify({'error': 'forbidden'}), 403

    if data.get('channelId'):
        channel_ids = [str(data['channelId']).strip()]
    else:
        settings = components.database.get_settings(company_id)
        channel_ids = settings.channel_ids if settings else []
    if not channel_ids:
        return jsonify({'error': 'No channel configured. Select a channel and save settings first.'}), 400

    status_text = str(data.get('status') or 'Live')
    status = GameStatus.FINAL if kind == EventKind.GAME_END else GameStatus.LIVE

    game = GameState(
        game_id='simulated',
        home_team=str(data.get('homeTeam') or 'Home'),
        away_team=str(data.get('awayTeam') or 'Away'),
        home_score=_to_int(data.get('homeScore')),
        away_score=_to_int(data.get('awayScore')),
        period=_to_int(data.get('period'), 1),
        status=status,
        status_text=status_text,
        game_clock=str(data.get('gameClock') or ''),
    )
    message = format_game_update_message(game, kind)
    result = components.dispatcher.dispatch(message, channel_ids)

    if not result.delivered:
        return jsonify({'error': 'Failed to deliver message', 'failed': result.failed}), 502

    return jsonify({'ok': True, 'delivered': result.delivered, 'failed': result.failed})
