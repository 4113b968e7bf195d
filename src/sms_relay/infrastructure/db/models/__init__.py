"""Import all models so ``Base.metadata.create_all`` can discover them."""
from sms_relay.infrastructure.db.models.message import SmsMessageModel

__all__ = [
    "SmsMessageModel",
]
