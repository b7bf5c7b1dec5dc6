from .client import TwilioClient, create_twilio_client
from .config import TwilioConfig
from .exceptions import TwilioConfigError, TwilioError
from .models import mask_phone

__all__ = [
    "TwilioClient",
    "create_twilio_client",
    "TwilioConfig",
    "TwilioConfigError",
    "TwilioError",
    "mask_phone",
]
