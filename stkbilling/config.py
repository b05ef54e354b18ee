import os
from dataclasses import dataclass
from typing import Any, Mapping

from dotenv import load_dotenv

from stkbilling.errors import ConfigurationError

load_dotenv()


# Daraja base URLs
_BASE_URLS = {
    "sandbox":    "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}

_EP_AUTH     = "/oauth/v1/generate?grant_type=client_credentials"
_EP_STK_PUSH = "/mpesa/stkpush/v1/processrequest"

# Startup is refused unless every one of these is set
_REQUIRED_KEYS = (
    "MPESA_CONSUMER_KEY",
    "MPESA_CONSUMER_SECRET",
    "MPESA_SHORTCODE",
    "MPESA_PASSKEY",
    "CALLBACK_BASE_URL",
    "SQLALCHEMY_DATABASE_URI",
)


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
    CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')

    # M-Pesa (Daraja) configuration
    MPESA_CONSUMER_KEY = os.getenv('MPESA_CONSUMER_KEY')
    MPESA_CONSUMER_SECRET = os.getenv('MPESA_CONSUMER_SECRET')
    MPESA_SHORTCODE = os.getenv('MPESA_SHORTCODE')  # Paybill / Till
    MPESA_PASSKEY = os.getenv('MPESA_PASSKEY')
    MPESA_ENV = os.getenv('MPESA_ENV', 'sandbox')
    MPESA_AMOUNT = os.getenv('MPESA_AMOUNT', '500')
    MPESA_ACCOUNT_REF = os.getenv('MPESA_ACCOUNT_REF', 'Subscription')
    MPESA_HTTP_TIMEOUT = int(os.getenv('MPESA_HTTP_TIMEOUT', '30'))

    # e.g. https://your-service.onrender.com
    CALLBACK_BASE_URL = os.getenv('CALLBACK_BASE_URL')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    CELERY_BROKER_URL = 'memory://'
    CELERY_RESULT_BACKEND = 'cache+memory://'

    MPESA_CONSUMER_KEY = 'test_consumer_key'
    MPESA_CONSUMER_SECRET = 'test_consumer_secret'
    MPESA_SHORTCODE = '174379'
    MPESA_PASSKEY = 'test_passkey'
    MPESA_ENV = 'sandbox'
    MPESA_AMOUNT = '500'
    MPESA_ACCOUNT_REF = 'Subscription'
    CALLBACK_BASE_URL = 'https://billing.example.com'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


@dataclass(frozen=True)
class MpesaSettings:
    """
    Immutable gateway settings, built once at startup and handed to every
    component that talks to the gateway or builds push requests.
    """
    consumer_key: str
    consumer_secret: str
    shortcode: str
    passkey: str
    callback_base_url: str
    environment: str = "sandbox"
    default_amount: str = "500"
    account_reference: str = "Subscription"
    transaction_desc: str = "Subscription Payment"
    transaction_type: str = "CustomerPayBillOnline"
    http_timeout: int = 30

    @property
    def base_url(self) -> str:
        return _BASE_URLS[self.environment]

    @property
    def oauth_url(self) -> str:
        return f"{self.base_url}{_EP_AUTH}"

    @property
    def stk_push_url(self) -> str:
        return f"{self.base_url}{_EP_STK_PUSH}"

    @property
    def callback_url(self) -> str:
        return f"{self.callback_base_url.rstrip('/')}/callback"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "MpesaSettings":
        """
        Build settings from a Flask config (or any mapping).

        Raises:
            ConfigurationError: if a required key is missing or the
                environment selector is not 'sandbox' / 'production'
        """
        missing = [key for key in _REQUIRED_KEYS if not values.get(key)]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing,
            )

        environment = str(values.get("MPESA_ENV") or "sandbox").lower()
        if environment not in _BASE_URLS:
            raise ConfigurationError(
                f"MPESA_ENV must be 'sandbox' or 'production', got '{environment}'"
            )

        return cls(
            consumer_key=values["MPESA_CONSUMER_KEY"],
            consumer_secret=values["MPESA_CONSUMER_SECRET"],
            shortcode=str(values["MPESA_SHORTCODE"]),
            passkey=values["MPESA_PASSKEY"],
            callback_base_url=values["CALLBACK_BASE_URL"],
            environment=environment,
            default_amount=values.get("MPESA_AMOUNT") or "500",
            account_reference=values.get("MPESA_ACCOUNT_REF") or "Subscription",
            http_timeout=int(values.get("MPESA_HTTP_TIMEOUT") or 30),
        )
