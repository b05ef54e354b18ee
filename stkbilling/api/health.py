from flask import Blueprint

health_bp = Blueprint('health', __name__)


@health_bp.route('/', methods=['GET'])
def liveness():
    return 'Subscription billing backend running', 200, {'Content-Type': 'text/plain; charset=utf-8'}
