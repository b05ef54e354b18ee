import os
import sys

from stkbilling import create_app
from stkbilling.errors import ConfigurationError
from stkbilling.extensions import db, celery_app
from stkbilling.utils.logger import get_logger

logger = get_logger('stkbilling.startup')

try:
    app = create_app(os.getenv('FLASK_ENV', 'development'))
except ConfigurationError as e:
    logger.error(f'Refusing to start: {e.message}')
    sys.exit(1)

# celery -A app.celery worker
celery = celery_app


@app.shell_context_processor
def make_shell_context():
    from stkbilling.models import Subscriber, PaymentTransaction, AuditLog
    return {
        'db': db,
        'Subscriber': Subscriber,
        'PaymentTransaction': PaymentTransaction,
        'AuditLog': AuditLog
    }


if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=int(os.getenv('PORT', 5000)))
