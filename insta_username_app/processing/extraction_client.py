"""
Gemini Username Extraction Client

Extracts Instagram usernames from a single image using Gemini via OpenRouter.
"""

import base64
import json
from typing import List, Optional

import requests
from pydantic import BaseModel, ValidationError

from .config import Settings
from .errors import ExtractionError
from .logger import get_logger

logger = get_logger(__name__)

ERROR_PREFIX = "Image processing failed"

EXTRACTION_PROMPT = (
    "Analyze this image to find any Instagram usernames. Usernames may start with '@'. "
    "Extract all of them. Only return valid usernames."
)

RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "instagram_usernames",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "usernames": {
                    "type": "array",
                    "items": {
                        "type": "string",
                        "description": 'An Instagram username found in the image, without the "@" symbol.'
                    }
                }
            },
            "required": ["usernames"],
            "additionalProperties": False
        }
    }
}


class UsernamePayload(BaseModel):
    usernames: Optional[List[str]] = None


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]
    return text.strip()


def parse_usernames(content_text: Optional[str]) -> List[str]:
    """
    Parse the model's message content into a list of usernames.

    Empty content, or a missing/null "usernames" key, means no usernames.
    Anything that is not a JSON object of that shape raises ExtractionError.
    """
    if content_text is None:
        return []
    if not isinstance(content_text, str):
        raise ExtractionError(f"{ERROR_PREFIX}: malformed API response")
    cleaned = strip_code_fence(content_text)
    if not cleaned:
        return []

    try:
        raw_data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"{ERROR_PREFIX}: response was not valid JSON ({e.msg})") from e

    if not isinstance(raw_data, dict):
        raise ExtractionError(f"{ERROR_PREFIX}: expected a JSON object, got {type(raw_data).__name__}")

    try:
        payload = UsernamePayload(**raw_data)
    except ValidationError as e:
        raise ExtractionError(f"{ERROR_PREFIX}: unexpected response shape") from e

    return payload.usernames or []


class ExtractionClient:
    """One outbound vision call per extract(). No retries, no caching."""

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str,
        model: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExtractionClient":
        return cls(
            api_key=settings.openrouter_api_key,
            api_url=settings.openrouter_api_url,
            model=settings.openrouter_model,
            timeout=settings.request_timeout,
        )

    def build_payload(self, image_bytes: bytes, mime_type: str) -> dict:
        base64_img = base64.b64encode(image_bytes).decode('utf-8')
        content = [
            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{base64_img}"}},
            {"type": "text", "text": EXTRACTION_PROMPT},
        ]
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": content}],
            "response_format": RESPONSE_FORMAT,
            "temperature": 0.1,
        }

    def extract(self, image_bytes: bytes, mime_type: str) -> List[str]:
        """
        Send one image to the vision model and return the usernames it reports.

        Args:
            image_bytes: Raw image content
            mime_type: MIME type of the image (e.g. image/png)

        Returns:
            Usernames as returned by the model (may still carry a leading '@')

        Raises:
            ExtractionError: On missing/rejected credentials, transport errors,
                non-200 responses or malformed content
        """
        if not self.api_key or not self.api_key.strip():
            logger.error("OPENROUTER_API_KEY not set")
            raise ExtractionError(f"{ERROR_PREFIX}: API key not configured")

        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        data = self.build_payload(image_bytes, mime_type)

        logger.info(f"Sending {len(image_bytes)} byte {mime_type} image to {self.model}")
        try:
            response = self.session.post(self.api_url, headers=headers, json=data, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error("Request timed out")
            raise ExtractionError(f"{ERROR_PREFIX}: request timed out") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Connection error - {e}")
            raise ExtractionError(f"{ERROR_PREFIX}: {e}") from e

        if response.status_code in (401, 403):
            logger.error(f"API rejected credentials ({response.status_code})")
            raise ExtractionError(f"{ERROR_PREFIX}: API key rejected (HTTP {response.status_code})")
        if response.status_code != 200:
            logger.error(f"API error {response.status_code}: {response.text[:500]}")
            raise ExtractionError(f"{ERROR_PREFIX}: API error {response.status_code}")

        try:
            content_text = response.json()['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected response body: {response.text[:500]}")
            raise ExtractionError(f"{ERROR_PREFIX}: malformed API response") from e

        usernames = parse_usernames(content_text)
        logger.info(f"Model returned {len(usernames)} username(s)")
        return usernames
