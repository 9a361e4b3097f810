import logging

from flask import Flask, jsonify, request
from flask_socketio import SocketIO, send

from .config import get_settings
from .controller import SimulationController

logger = logging.getLogger(__name__)


def create_app(settings=None, rng=None):
    settings = settings or get_settings()
    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.secret_key
    socketio = SocketIO(app, async_mode=settings.async_mode, cors_allowed_origins='*')

    controller = SimulationController(
        settings,
        broadcast=lambda message: socketio.send(message),
        send=lambda handle, message: socketio.send(message, to=handle),
        start_task=socketio.start_background_task,
        sleep=socketio.sleep,
        rng=rng,
    )
    app.extensions['roulette'] = controller

    # --- Routes & SocketIO Events ---
    @app.route('/status')
    def status():
        return jsonify(controller.snapshot())

    @socketio.on('connect')
    def handle_connect():
        logger.info("Client connected: %s", request.sid)
        send({'message': 'Simulation state', **controller.snapshot()})

    @socketio.on('message')
    def handle_message(data):
        controller.handle_command(request.sid, data)

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        logger.info("Client disconnected: %s", request.sid)
        controller.disconnect(request.sid)

    return app, socketio


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.log_level,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    if settings.async_mode == 'eventlet':
        import eventlet
        eventlet.monkey_patch()
    app, socketio = create_app(settings)
    logger.info("Starting roulette server on http://%s:%d", settings.host, settings.port)
    socketio.run(app, host=settings.host, port=settings.port)


if __name__ == '__main__':
    main()
