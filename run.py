import logging

from skillswap import create_app, socketio
from skillswap.config import Config

# Create Flask app instance
app = create_app()

logger = logging.getLogger(__name__)

if __name__ == '__main__':
    debug_mode = Config.DEBUG
    logger.info("Debug mode is %s", 'on' if debug_mode else 'off')
    socketio.run(app, debug=debug_mode, host="0.0.0.0", port=5000, allow_unsafe_werkzeug=debug_mode)
