"""
Unit Tests for STK Push initiation
"""

from unittest.mock import Mock, patch

import pytest
import requests

from stkbilling.errors import UpstreamError, ValidationError
from stkbilling.models import PaymentTransaction, TransactionStatus
from stkbilling.providers import TokenCache
from stkbilling.services import build_services
from tests.helpers import mock_http_response, stk_accepted_response, token_response


class TestTransactionInitiator:

    @pytest.fixture
    def services(self, settings, db):
        return build_services(settings, token_cache=TokenCache())

    @pytest.fixture
    def initiator(self, services):
        return services.initiator

    @pytest.mark.parametrize("phone", [None, "", "   "])
    def test_missing_phone_rejected_without_outbound_calls(self, initiator, services, phone):
        with patch("requests.get") as mock_get, \
             patch.object(services.gateway._session, "post") as mock_post:
            with pytest.raises(ValidationError, match="phone required"):
                initiator.initiate(phone)

        mock_get.assert_not_called()
        mock_post.assert_not_called()

    def test_token_then_push_in_order(self, initiator, services):
        manager = Mock()

        with patch("requests.get", return_value=token_response()) as mock_get, \
             patch.object(services.gateway._session, "post", return_value=stk_accepted_response()) as mock_post:
            manager.attach_mock(mock_get, "token")
            manager.attach_mock(mock_post, "push")

            initiator.initiate("0712345678")

        assert [c[0] for c in manager.mock_calls] == ["token", "push"]

    def test_push_uses_bearer_token_and_normalised_phone(self, initiator, services):
        with patch("requests.get", return_value=token_response()), \
             patch.object(services.gateway._session, "post", return_value=stk_accepted_response()) as mock_post:
            initiator.initiate("+254712345678", amount=1000, account_reference="HOST-42")

        args, kwargs = mock_post.call_args
        assert args[0] == "https://sandbox.safaricom.co.ke/mpesa/stkpush/v1/processrequest"
        assert kwargs["headers"]["Authorization"] == "Bearer daraja_tok_abc"
        body = kwargs["json"]
        assert body["PhoneNumber"] == "254712345678"
        assert body["PartyA"] == "254712345678"
        assert body["Amount"] == 1000
        assert body["AccountReference"] == "HOST-42"

    def test_gateway_response_returned_unmodified(self, initiator, services):
        gateway_body = {
            "MerchantRequestID": "mrq-9",
            "CheckoutRequestID": "ws_CO_9",
            "ResponseCode": "0",
            "CustomerMessage": "Success",
            "Extra": {"nested": True},
        }

        with patch("requests.get", return_value=token_response()), \
             patch.object(services.gateway._session, "post", return_value=mock_http_response(gateway_body)):
            result = initiator.initiate("0712345678")

        assert result == gateway_body

    def test_accepted_push_is_journalled(self, initiator, services):
        with patch("requests.get", return_value=token_response()), \
             patch.object(services.gateway._session, "post", return_value=stk_accepted_response("ws_CO_J1")):
            initiator.initiate("0712345678", amount=250)

        transaction = PaymentTransaction.query.filter_by(checkout_request_id="ws_CO_J1").first()
        assert transaction is not None
        assert transaction.status == TransactionStatus.INITIATED.value
        assert transaction.phone == "254712345678"
        assert transaction.amount == "250"
        assert transaction.merchant_request_id == "mrq-001"

    def test_push_http_error_raises_with_payload(self, initiator, services):
        error_body = {"requestId": "r-1", "errorCode": "400.002.02", "errorMessage": "Bad Request - Invalid Amount"}

        with patch("requests.get", return_value=token_response()), \
             patch.object(services.gateway._session, "post", return_value=mock_http_response(error_body, 400)):
            with pytest.raises(UpstreamError) as exc_info:
                initiator.initiate("0712345678")

        assert exc_info.value.payload == error_body
        assert PaymentTransaction.query.count() == 0

    def test_push_network_error_raises(self, initiator, services):
        with patch("requests.get", return_value=token_response()), \
             patch.object(services.gateway._session, "post", side_effect=requests.ConnectionError("timeout")):
            with pytest.raises(UpstreamError, match="network error"):
                initiator.initiate("0712345678")

    def test_token_failure_stops_before_push(self, initiator, services):
        with patch("requests.get", return_value=mock_http_response({"error": "invalid_client"}, 401)), \
             patch.object(services.gateway._session, "post") as mock_post:
            with pytest.raises(UpstreamError):
                initiator.initiate("0712345678")

        mock_post.assert_not_called()

    def test_token_cached_across_initiations(self, initiator, services):
        with patch("requests.get", return_value=token_response()) as mock_get, \
             patch.object(services.gateway._session, "post", side_effect=[
                 stk_accepted_response("ws_CO_1"), stk_accepted_response("ws_CO_2")
             ]) as mock_post:
            initiator.initiate("0712345678")
            initiator.initiate("0722000000")

        assert mock_get.call_count == 1
        assert mock_post.call_count == 2

    def test_rejected_token_is_not_reused(self, initiator, services):
        rejected = {"requestId": "r-2", "errorCode": "404.001.03", "errorMessage": "Invalid Access Token"}

        with patch("requests.get", return_value=token_response()) as mock_get, \
             patch.object(services.gateway._session, "post", return_value=mock_http_response(rejected, 401)):
            for _ in range(2):
                with pytest.raises(UpstreamError) as exc_info:
                    initiator.initiate("0712345678")
                assert exc_info.value.upstream_status == 401

        assert mock_get.call_count == 2

    def test_other_push_errors_keep_cached_token(self, initiator, services):
        with patch("requests.get", return_value=token_response()) as mock_get, \
             patch.object(services.gateway._session, "post", side_effect=[
                 mock_http_response({"errorMessage": "Bad Request - Invalid Amount"}, 400),
                 stk_accepted_response("ws_CO_3")
             ]):
            with pytest.raises(UpstreamError):
                initiator.initiate("0712345678")
            initiator.initiate("0712345678")

        assert mock_get.call_count == 1

    def test_sent_push_logged_with_normalised_phone(self, initiator, services):
        with patch("requests.get", return_value=token_response()), \
             patch.object(services.gateway._session, "post", return_value=stk_accepted_response("ws_CO_L1")), \
             patch("stkbilling.services.transaction_service.logger") as mock_logger:
            initiator.initiate(" 0712 345 678 ")

        message = mock_logger.info.call_args[0][0]
        assert "254712345678" in message
        assert "ws_CO_L1" in message
