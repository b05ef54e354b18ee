"""
Integration Tests for POST /stkpush
"""

from unittest.mock import patch

import pytest
import requests

from stkbilling.models import PaymentTransaction
from stkbilling.services import EXTENSION_KEY
from tests.helpers import mock_http_response, stk_accepted_response, token_response


@pytest.fixture
def gateway_session(app):
    return app.extensions[EXTENSION_KEY].gateway._session


class TestStkPushEndpoint:

    @pytest.mark.parametrize("body", [{}, {"phone": ""}, {"phone": "   "}, {"amount": 100}])
    def test_missing_phone_returns_400(self, client, gateway_session, body):
        with patch("requests.get") as mock_get, \
             patch.object(gateway_session, "post") as mock_post:
            response = client.post('/stkpush', json=body)

        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'message': 'phone required', 'data': None}
        mock_get.assert_not_called()
        mock_post.assert_not_called()

    def test_non_json_body_returns_400(self, client):
        response = client.post('/stkpush', data='phone=0712345678', content_type='text/plain')

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_accepted_push(self, client, gateway_session):
        with patch("requests.get", return_value=token_response()), \
             patch.object(gateway_session, "post", return_value=stk_accepted_response("ws_CO_E2E")) as mock_post:
            response = client.post('/stkpush', json={'phone': '0712345678', 'accountRef': 'HOST-42'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['data']['CheckoutRequestID'] == 'ws_CO_E2E'
        assert data['data']['ResponseCode'] == '0'

        body = mock_post.call_args.kwargs['json']
        assert body['BusinessShortCode'] == '174379'
        assert body['PhoneNumber'] == '254712345678'
        assert body['Amount'] == '500'
        assert body['AccountReference'] == 'HOST-42'
        assert body['CallBackURL'] == 'https://billing.example.com/callback'

        assert PaymentTransaction.query.filter_by(checkout_request_id='ws_CO_E2E').count() == 1

    def test_upstream_rejection_returns_500_with_payload(self, client, gateway_session):
        error_body = {"requestId": "r-1", "errorCode": "500.001.1001", "errorMessage": "Wrong credentials"}

        with patch("requests.get", return_value=token_response()), \
             patch.object(gateway_session, "post", return_value=mock_http_response(error_body, 500)):
            response = client.post('/stkpush', json={'phone': '0712345678'})

        assert response.status_code == 500
        data = response.get_json()
        assert data['success'] is False
        assert data['data'] == error_body
        assert 'status code 500' in data['message']

    def test_network_failure_returns_500(self, client, gateway_session):
        with patch("requests.get", return_value=token_response()), \
             patch.object(gateway_session, "post", side_effect=requests.Timeout("read timed out")):
            response = client.post('/stkpush', json={'phone': '0712345678'})

        assert response.status_code == 500
        data = response.get_json()
        assert data['success'] is False
        assert data['data'] is None

    def test_token_failure_returns_500(self, client, gateway_session):
        with patch("requests.get", return_value=mock_http_response({"error": "invalid_client"}, 401)), \
             patch.object(gateway_session, "post") as mock_post:
            response = client.post('/stkpush', json={'phone': '0712345678'})

        assert response.status_code == 500
        assert response.get_json()['data'] == {"error": "invalid_client"}
        mock_post.assert_not_called()
