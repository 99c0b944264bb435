from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def get_manager():
    from brainbrawl import EXTENSION_KEY
    return current_app.extensions[EXTENSION_KEY]


@main.route('/')
def index():
    return jsonify({
        'message': 'Welcome to the Brain Brawl game server!',
        'role': 'player',
        'namespace': current_app.config.get('SOCKETIO_NAMESPACE', '/ws'),
    })


@main.route('/admin')
def admin():
    return jsonify({
        'message': 'Brain Brawl admin console',
        'role': 'admin',
        'namespace': current_app.config.get('SOCKETIO_NAMESPACE', '/ws'),
    })


@main.route('/api/state')
def get_state():
    return jsonify(get_manager().snapshot())


@main.route('/api/config')
def get_config():
    return jsonify(get_manager().settings.public())
