# src/payment/gateway.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from config import settings
from errors import GatewayError

logger = logging.getLogger(__name__)

VALID_STATUSES = ("VALID", "VALIDATED")


@dataclass
class CheckoutRequest:
    transaction_id: str
    amount: float
    currency: str
    product_name: str
    customer_name: str
    customer_email: str
    success_url: str
    fail_url: str
    cancel_url: str
    ipn_url: str


@dataclass
class GatewaySession:
    redirect_url: str
    raw_payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GatewayValidation:
    valid: bool
    raw_payload: Dict[str, Any] = field(default_factory=dict)


class SSLCommerzGateway:
    """Client for the SSLCommerz hosted checkout and validation APIs."""

    def __init__(
            self,
            store_id: Optional[str] = None,
            store_password: Optional[str] = None,
            payment_api: Optional[str] = None,
            validation_api: Optional[str] = None,
            timeout: Optional[float] = None,
            session: Optional[requests.Session] = None,
    ):
        self.store_id = store_id if store_id is not None else settings.SSL_STORE_ID
        self.store_password = store_password if store_password is not None else settings.SSL_STORE_PASSWORD
        self.payment_api = payment_api or settings.SSL_PAYMENT_API
        self.validation_api = validation_api or settings.SSL_VALIDATION_API
        self.timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS
        self.http = session or requests.Session()

    def _build_session_form(self, request: CheckoutRequest) -> Dict[str, Any]:
        return {
            "store_id": self.store_id,
            "store_passwd": self.store_password,
            "total_amount": f"{request.amount:.2f}",
            "currency": request.currency,
            "tran_id": request.transaction_id,
            "success_url": request.success_url,
            "fail_url": request.fail_url,
            "cancel_url": request.cancel_url,
            "ipn_url": request.ipn_url,
            "shipping_method": "NO",
            "product_name": request.product_name,
            "product_category": "Subscription",
            "product_profile": "non-physical-goods",
            "cus_name": request.customer_name,
            "cus_email": request.customer_email,
            # The gateway rejects sessions without these customer fields
            "cus_add1": "N/A",
            "cus_city": "Dhaka",
            "cus_postcode": "1000",
            "cus_country": "Bangladesh",
            "cus_phone": "N/A",
        }

    def _parse_json(self, response: requests.Response, operation: str) -> Dict[str, Any]:
        if response.status_code != 200:
            logger.error(f"SSLCommerz {operation} returned HTTP {response.status_code}")
            raise GatewayError(context={"operation": operation, "status_code": response.status_code})
        try:
            payload = response.json()
        except ValueError:
            logger.error(f"SSLCommerz {operation} returned a non-JSON body")
            raise GatewayError(context={"operation": operation, "reason": "invalid json"})
        if not isinstance(payload, dict):
            raise GatewayError(context={"operation": operation, "reason": "unexpected payload"})
        return payload

    def create_session(self, request: CheckoutRequest) -> GatewaySession:
        """Open a hosted checkout session and return the page the user must be sent to."""
        try:
            response = self.http.post(self.payment_api, data=self._build_session_form(request), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"SSLCommerz session request failed for {request.transaction_id}: {e}", exc_info=True)
            raise GatewayError(context={"operation": "create_session", "reason": str(e)}) from e

        payload = self._parse_json(response, "create_session")
        redirect_url = payload.get("GatewayPageURL")
        if str(payload.get("status", "")).upper() != "SUCCESS" or not redirect_url:
            logger.error(
                f"SSLCommerz refused session for {request.transaction_id}: {payload.get('failedreason')}"
            )
            raise GatewayError(context={"operation": "create_session", "reason": payload.get("failedreason")})
        return GatewaySession(redirect_url=redirect_url, raw_payload=payload)

    def validate_transaction(self, validation_token: str) -> GatewayValidation:
        """Ask the gateway whether a val_id corresponds to a completed payment."""
        params = {
            "val_id": validation_token,
            "store_id": self.store_id,
            "store_passwd": self.store_password,
            "format": "json",
        }
        try:
            response = self.http.get(self.validation_api, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"SSLCommerz validation request failed: {e}", exc_info=True)
            raise GatewayError(context={"operation": "validate_transaction", "reason": str(e)}) from e

        payload = self._parse_json(response, "validate_transaction")
        valid = str(payload.get("status", "")).upper() in VALID_STATUSES
        return GatewayValidation(valid=valid, raw_payload=payload)
