from flask import Blueprint, request, jsonify
from marshmallow import ValidationError as SchemaValidationError

from stkbilling.errors import ValidationError, UpstreamError
from stkbilling.schemas.stk_push_schema import InitiatePushSchema
from stkbilling.services import get_services
from stkbilling.utils.logger import get_logger

payments_bp = Blueprint('payments', __name__)
logger = get_logger(__name__)

initiate_schema = InitiatePushSchema()


def _validation_message(messages) -> str:
    if isinstance(messages, dict) and 'phone' in messages:
        return 'phone required'
    return 'Invalid request body'


@payments_bp.route('/stkpush', methods=['POST'])
def initiate_stk_push():
    """
    Initiate an STK Push

    Body:
        {
            "phone": "0712345678",
            "amount": 500,            // optional, configured default
            "accountRef": "HOST-42"   // optional
        }
    """
    try:
        try:
            data = initiate_schema.load(request.get_json(silent=True) or {})
        except SchemaValidationError as e:
            raise ValidationError(_validation_message(e.messages)) from e

        response = get_services().initiator.initiate(
            phone=data['phone'],
            amount=data.get('amount'),
            account_reference=data.get('account_reference')
        )

        return jsonify({
            'success': True,
            'data': response
        }), 200

    except ValidationError as e:
        return jsonify({
            'success': False,
            'message': e.message,
            'data': None
        }), e.status_code

    except UpstreamError as e:
        logger.error(f'STK Error {e.payload if e.payload is not None else e.message}')
        return jsonify({
            'success': False,
            'message': e.message,
            'data': e.payload
        }), e.status_code

    except Exception as e:
        logger.exception('STK Error')
        return jsonify({
            'success': False,
            'message': str(e),
            'data': None
        }), 500
