from dataclasses import dataclass
from typing import Optional
import logging

import httpx

from app.config import Settings
from app.utils.exceptions import InvalidCredentials

logger = logging.getLogger(__name__)

GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"


@dataclass
class GoogleUserInfo:
    sub: str  # Google user ID
    email: str
    name: str
    picture: Optional[str] = None
    email_verified: bool = False


class GoogleIdentityVerifier:
    """Exchanges a Google access token for the identity it was issued to."""

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.client_id = settings.GOOGLE_CLIENT_ID
        self.require_token = settings.GOOGLE_REQUIRE_ACCESS_TOKEN
        self.transport = transport

    def _get(self, client: httpx.Client, url: str, **kwargs) -> dict:
        try:
            response = client.get(url, timeout=15.0, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.RequestError as e:
            logger.error(f"[Google] Request error: {e}")
        except httpx.HTTPStatusError as e:
            logger.warning(f"[Google] HTTP error: {e}")
        except ValueError as e:
            logger.error(f"[Google] Bad response body: {e}")
        raise InvalidCredentials("Google sign in failed")

    def resolve(self, access_token: str) -> GoogleUserInfo:
        with httpx.Client(transport=self.transport) as client:
            if self.client_id:
                info = self._get(client, GOOGLE_TOKENINFO_URL, params={"access_token": access_token})
                if info.get("aud") != self.client_id and info.get("azp") != self.client_id:
                    logger.warning("[Google] Token audience does not match configured client id")
                    raise InvalidCredentials("Google sign in failed")

            data = self._get(client, GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})

        if not data.get("sub") or not data.get("email"):
            raise InvalidCredentials("Google sign in failed")
        verified = data.get("email_verified") in (True, "true")
        if not verified:
            logger.warning(f"[Google] Unverified Google email rejected: {data.get('email')}")
            raise InvalidCredentials("Google sign in failed")

        return GoogleUserInfo(
            sub=str(data["sub"]),
            email=data["email"],
            name=data.get("name") or data["email"].split("@")[0],
            picture=data.get("picture"),
            email_verified=verified,
        )
