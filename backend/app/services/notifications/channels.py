"""
Message delivery channels.

Two logical channels: WhatsApp (rich) and SMS (baseline). Both either send
or raise DeliveryFailure. Twilio is the production implementation; the
console service just logs and is used when Twilio is not configured.
"""

import logging

import httpx

from ...config import Settings, settings as default_settings
from ..errors import DeliveryFailure

logger = logging.getLogger(__name__)


class MessageService:
    """Channel interface."""

    async def send_whatsapp(self, to: str, body: str) -> None:
        raise NotImplementedError

    async def send_sms(self, to: str, body: str) -> None:
        raise NotImplementedError


class TwilioMessageService(MessageService):
    """Send through the Twilio Messages API."""

    def __init__(
        self,
        settings: Settings = default_settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.account_sid = settings.twilio_account_sid
        self.auth_token = settings.twilio_auth_token
        self.whatsapp_from = settings.twilio_whatsapp_from
        self.sms_from = settings.twilio_sms_from
        self.api_url = settings.twilio_api_url.rstrip("/")
        self.timeout = settings.twilio_timeout
        self.transport = transport

    async def send_whatsapp(self, to: str, body: str) -> None:
        if not self.whatsapp_from:
            raise DeliveryFailure("Twilio WhatsApp not configured")
        await self._post({
            "From": f"whatsapp:{self.whatsapp_from}",
            "To": f"whatsapp:{to}",
            "Body": body,
        })

    async def send_sms(self, to: str, body: str) -> None:
        if not self.sms_from:
            raise DeliveryFailure("Twilio SMS not configured")
        await self._post({
            "From": self.sms_from,
            "To": to,
            "Body": body,
        })

    async def _post(self, data: dict) -> None:
        url = f"{self.api_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    auth=(self.account_sid, self.auth_token),
                    data=data,
                )
        except httpx.HTTPError as e:
            raise DeliveryFailure(f"Twilio request failed: {e}") from e

        if response.status_code not in (200, 201):
            try:
                error = response.json()
                detail = f"[{error.get('code')}] {error.get('message', 'Unknown error')}"
            except ValueError:
                detail = response.reason_phrase
            raise DeliveryFailure(f"Twilio API error {response.status_code}: {detail}")

        try:
            sid = response.json().get("sid")
        except ValueError:
            sid = None
        logger.info(f"Twilio accepted message to {data['To']} (sid={sid})")


class ConsoleMessageService(MessageService):
    """Development fallback: log instead of sending."""

    async def send_whatsapp(self, to: str, body: str) -> None:
        logger.info(f"[WhatsApp Mock] To: {to}, Message: {body}")

    async def send_sms(self, to: str, body: str) -> None:
        logger.info(f"[SMS Mock] To: {to}, Message: {body}")


def get_message_service(settings: Settings = default_settings) -> MessageService:
    """Twilio if credentials are configured, console otherwise."""
    if settings.twilio_configured:
        return TwilioMessageService(settings)
    logger.warning("Twilio not configured, messages go to the log")
    return ConsoleMessageService()
