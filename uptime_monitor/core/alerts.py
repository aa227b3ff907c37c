"""Alert sender delivering SMS messages through the Twilio REST API."""

from typing import Protocol

import aiohttp

from uptime_monitor.config import TwilioConfig
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

MAX_SMS_LENGTH = 1600
PHONE_LENGTH = 10


class AlertSender(Protocol):
    """Delivers a text message to a phone number."""

    async def send(self, phone: str, message: str) -> bool:
        ...


class TwilioSmsSender:
    """
    SMS alert sender using Twilio's Messages resource.

    Phone numbers are 10-digit US numbers and are sent with a ``+1`` prefix.
    Delivery is attempted once; failures are logged and reported as False.
    """

    def __init__(self, config: TwilioConfig):
        """
        Initialize SMS sender.

        Args:
            config: Twilio configuration
        """
        self.config = config

        logger.info(
            "Twilio SMS sender initialized",
            extra={"enabled": config.enabled}
        )

    @property
    def messages_url(self) -> str:
        return (
            f"{self.config.api_base.rstrip('/')}/2010-04-01/Accounts/"
            f"{self.config.account_sid}/Messages.json"
        )

    async def send(self, phone: str, message: str) -> bool:
        """
        Send an SMS.

        Args:
            phone: 10-digit destination phone number
            message: Message body, 1 to 1600 characters

        Returns:
            bool: True if Twilio accepted the message
        """
        if not self.config.enabled:
            logger.warning(
                "SMS alerts disabled, message not sent",
                extra={"phone": phone, "alert_message": message}
            )
            return False

        phone = phone.strip() if isinstance(phone, str) else ""
        message = message.strip() if isinstance(message, str) else ""

        if len(phone) != PHONE_LENGTH or not phone.isdigit():
            logger.error("Invalid phone number for SMS alert", extra={"phone": phone})
            return False

        if not message or len(message) > MAX_SMS_LENGTH:
            logger.error(
                "Invalid SMS alert message",
                extra={"length": len(message)}
            )
            return False

        payload = {
            "From": self.config.from_phone,
            "To": f"+1{phone}",
            "Body": message,
        }

        try:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            auth = aiohttp.BasicAuth(self.config.account_sid, self.config.auth_token)

            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.messages_url, data=payload, auth=auth) as response:
                    if 200 <= response.status < 300:
                        logger.info("SMS alert sent", extra={"phone": phone})
                        return True

                    logger.error(
                        "Twilio API error",
                        extra={"phone": phone, "status": response.status}
                    )
                    return False

        except Exception as e:
            logger.error(
                "Failed to send SMS alert",
                extra={"phone": phone, "error": str(e)}
            )
            return False
