"""Whop REST client for chat channels and messages"""
from typing import Any, Dict, List, Optional
import requests

from ..errors import WhopAPIError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

WHOP_API_BASE = "https://api.whop.com/api/v1"


class WhopClient:
    """Thin client over the Whop chat endpoints"""

    def __init__(self, api_key: Optional[str], base_url: str = WHOP_API_BASE, timeout: int = 15):
        """
        Initialize Whop client

        Args:
            api_key: Whop app API key (must have access to the target company)
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise WhopAPIError("WHOP_API_KEY not configured")
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def list_chat_channels(self, company_id: str) -> List[Dict[str, Any]]:
        """
        List all chat channels for a company

        Args:
            company_id: Whop company id

        Returns:
            Raw channel objects as returned by the API
        """
        url = f"{self.base_url}/chat_channels"
        logger.debug(f"Fetching chat channels for company {company_id}")
        response = self._request("GET", url, params={"company_id": company_id})
        channels = response.get("data") or []
        logger.info(f"Fetched {len(channels)} chat channel(s) for company {company_id}")
        return channels

    def create_message(self, channel_id: str, content: str) -> Dict[str, Any]:
        """
        Post a message to a chat channel

        Args:
            channel_id: Target chat channel id
            content: Message text

        Returns:
            Created message object
        """
        url = f"{self.base_url}/messages"
        return self._request("POST", url, json={"channel_id": channel_id, "content": content})

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        headers = self._headers()
        try:
            response = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise WhopAPIError(f"Whop API request failed: {e}") from e

        if not response.ok:
            raise WhopAPIError(
                f"Whop API error: {self._error_message(response)}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise WhopAPIError(f"Whop API returned invalid JSON: {e}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            error = body.get("message") or body.get("error")
            if isinstance(error, dict):
                error = error.get("message")
            if error:
                return str(error)
        return response.reason or f"HTTP {response.status_code}"
