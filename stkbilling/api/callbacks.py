"""
Callback API Endpoints
Receives STK Push results from Safaricom
"""

from flask import Blueprint, request, jsonify

from stkbilling.services import get_services
from stkbilling.services.audit_service import AuditService, CALLBACK_UNMATCHED

callbacks_bp = Blueprint('callbacks', __name__)


@callbacks_bp.route('/callback', methods=['POST'])
def receive_callback():
    """
    Receive an STK Push result

    Body:
        {"Body": {"stkCallback": {...}}}

    Always answers HTTP 200; resultCode 1 only on an internal fault.
    """
    payload = request.get_json(silent=True)
    ack = get_services().callbacks.handle_callback(payload)
    return jsonify(ack), 200


@callbacks_bp.route('/callbacks/unmatched', methods=['GET'])
def list_unmatched_callbacks():
    """
    Successful payments with no matching subscriber, awaiting reconciliation
    """
    try:
        entries = AuditService.get_unresolved(CALLBACK_UNMATCHED)

        return jsonify({
            'success': True,
            'data': {
                'count': len(entries),
                'items': [entry.to_dict() for entry in entries]
            }
        }), 200

    except Exception as e:
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500
