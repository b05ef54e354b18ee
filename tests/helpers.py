"""
Shared builders for gateway responses and callback envelopes
"""
import json
from unittest.mock import Mock


def mock_http_response(json_data, status_code: int = 200) -> Mock:
    """Return a mock requests.Response whose .json() returns json_data."""
    resp = Mock()
    resp.ok = 200 <= status_code < 400
    resp.status_code = status_code
    resp.json.return_value = json_data
    resp.text = json.dumps(json_data)
    resp.headers = {"Content-Type": "application/json"}
    return resp


def token_response() -> Mock:
    """Valid Daraja OAuth token response (expires in ~1 hour)."""
    return mock_http_response({"access_token": "daraja_tok_abc", "expires_in": "3599"})


def stk_accepted_response(checkout_request_id: str = "ws_CO_ABC123") -> Mock:
    return mock_http_response({
        "MerchantRequestID":   "mrq-001",
        "CheckoutRequestID":   checkout_request_id,
        "ResponseCode":        "0",
        "ResponseDescription": "Success. Request accepted for processing",
        "CustomerMessage":     "Success. Request accepted for processing",
    })


def stk_callback(
        result_code=0,
        phone=254712345678,
        amount=500,
        receipt='QKT1ABC2DE',
        checkout_request_id='ws_CO_ABC123',
        phone_item_name='PhoneNumber'
) -> dict:
    """Callback envelope in the shape Safaricom delivers"""
    stk = {
        'MerchantRequestID': 'mrq-001',
        'CheckoutRequestID': checkout_request_id,
        'ResultCode': result_code,
        'ResultDesc': 'The service request is processed successfully.'
        if result_code == 0 else 'Request cancelled by user',
    }
    if result_code == 0:
        items = [
            {'Name': 'Amount', 'Value': amount},
            {'Name': 'MpesaReceiptNumber', 'Value': receipt},
            {'Name': 'TransactionDate', 'Value': 20240115093005},
        ]
        if phone is not None:
            items.append({'Name': phone_item_name, 'Value': phone})
        stk['CallbackMetadata'] = {'Item': items}
    return {'Body': {'stkCallback': stk}}
