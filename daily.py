"""Client for the Daily.co REST API that hosts the actual video calls."""

from typing import Optional

import httpx

from constants import DAILY_API_URL, DAILY_API_KEY, DAILY_ROOM_PRIVACY, DAILY_TIMEOUT_SECONDS
from errors import ProvisionerError
from logging_config import get_logger

logger = get_logger(__name__)


class DailyRoomProvisioner:
    def __init__(
        self,
        api_url: str = DAILY_API_URL,
        api_key: str = DAILY_API_KEY,
        privacy: str = DAILY_ROOM_PRIVACY,
        timeout_seconds: float = DAILY_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.privacy = privacy
        self.client = httpx.Client(
            base_url=self.api_url,
            timeout=timeout_seconds,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

    def create(self) -> str:
        """Create a new Daily room and return its join url."""
        logger.info("Creating Daily.co room")
        try:
            response = self.client.post("/rooms", json={"privacy": self.privacy})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise ProvisionerError(f"POST {self.api_url}/rooms failed: {e}") from e
        except ValueError as e:
            raise ProvisionerError(f"POST {self.api_url}/rooms returned invalid JSON") from e

        room_url = body.get("url") if isinstance(body, dict) else None
        if not room_url:
            raise ProvisionerError(f"POST {self.api_url}/rooms response has no url: {body}")
        logger.info(f"Daily.co room created: name={body.get('name')}, url={room_url}")
        return room_url

    def delete(self, room_id: str) -> bool:
        """
        Delete a Daily room by its name.

        Returns True when Daily confirms the deletion and False when the room
        was already gone (404).
        """
        logger.info(f"Deleting Daily.co room {room_id}")
        try:
            response = self.client.delete(f"/rooms/{room_id}")
            if response.status_code == 404:
                logger.warning(f"Daily.co room {room_id} not found, treating as deleted")
                return False
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise ProvisionerError(f"DELETE {self.api_url}/rooms/{room_id} failed: {e}") from e
        except ValueError as e:
            raise ProvisionerError(f"DELETE {self.api_url}/rooms/{room_id} returned invalid JSON") from e

        deleted = bool(body.get("deleted")) if isinstance(body, dict) else False
        logger.info(f"Daily.co room {room_id} deleted={deleted}")
        return deleted

    def close(self):
        self.client.close()
