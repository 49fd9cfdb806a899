from flask import Blueprint, jsonify, request

from ..utils.logger import setup_logger
from ..utils.timezone import now_utc
from . import get_components

logger = setup_logger(__name__)

cron = Blueprint('cron', __name__)


def _is_authorized(cron_secret) -> bool:
    """Open when no secret is set; otherwise a matching bearer token or a Vercel cron header"""
    if not cron_secret:
        return True
    if request.headers.get('Authorization') == f'Bearer {cron_secret}':
        return True
    return bool(request.headers.get('X-Vercel-Cron'))


@cron.route('/notifications', methods=['GET', 'POST'])
def run_notifications():
    components = get_components()
    if not _is_authorized(components.config.cron_secret):
        return jsonify({'error': 'Unauthorized'}), 401

    try:
        report = components.notification_service.process_game_notifications()
    except Exception as e:
        logger.error(f"Error in cron job: {e}", exc_info=True)
        return jsonify({'error': str(e) or 'Failed to process notifications'}), 500

    return jsonify({
        'success': True,
        'timestamp': now_utc().isoformat(),
        'report': report.to_dict(),
    })
