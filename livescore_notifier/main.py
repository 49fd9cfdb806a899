"""Main entry point for the live score notifier"""
import argparse
import asyncio
import signal
import sys
import threading
from typing import Optional

from werkzeug.serving import make_server

from .api import create_app
from .components import build_components
from .config import Config
from .utils.logger import setup_logger

logger = setup_logger(__name__)


class LiveScoreNotifier:
    """Main orchestrator: polling loop plus the HTTP trigger surface"""

    def __init__(self, serve_http: bool = True):
        """Initialize notifier components"""
        self.config = Config()
        self.components = build_components(self.config)
        self.serve_http = serve_http
        self.running = False
        self._server = None
        self._server_thread: Optional[threading.Thread] = None

        # Setup signal handlers for graceful shutdown
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals"""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.running = False

    async def start(self):
        """Start the notifier"""
        self.running = True
        logger.info("Starting live score notifier...")

        pruned = self.components.database.prune_old_data(days=self.config.state_retention_days)
        if pruned:
            logger.info(f"Pruned {pruned} stale game state row(s)")

        if self.serve_http:
            self._start_http_server()

        notification_service = self.components.notification_service
        notification_task = asyncio.create_task(notification_service.start())

        try:
            while self.running:
                await asyncio.sleep(1)
        finally:
            logger.info("Stopping services...")
            notification_service.stop()
            notification_task.cancel()
            try:
                await notification_task
            except asyncio.CancelledError:
                pass
            self._stop_http_server()
            logger.info("Notifier stopped")

    def _start_http_server(self):
        flask_app = create_app(self.components)
        self._server = make_server(self.config.host, self.config.port, flask_app, threaded=True)
        self._server_thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._server_thread.start()
        logger.info(f"HTTP server listening on {self.config.host}:{self.config.port}")

    def _stop_http_server(self):
        if self._server is not None:
            self._server.shutdown()
            self._server_thread.join(timeout=5)
            self._server = None


async def run(serve_http: bool):
    try:
        notifier = LiveScoreNotifier(serve_http=serve_http)
        await notifier.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Live score chat notifier")
    parser.add_argument(
        "--no-server",
        action="store_true",
        help="Only run the polling loop, without the HTTP endpoints"
    )
    args = parser.parse_args()
    asyncio.run(run(serve_http=not args.no_server))


if __name__ == "__main__":
    main()
