"""Description: Waste image classification service using OpenAI's Responses API."""

import logging
import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from services.waste.prompts import build_system_prompt, build_user_prompt
from services.waste.response_parser import extract_usage, parse_function_call
from services.waste.schema import FUNCTION_DEFINITION, FUNCTION_NAME


def to_image_data_url(image_b64: bytes, media_type: str = "image/jpeg") -> str:
    """Convert base64 image bytes into a data URL suitable for vision input."""
    try:
        b64_str = image_b64.decode("utf-8")
    except Exception as exc:
        raise ValueError("Image bytes must be base64-encoded UTF-8.") from exc
    return f"data:{media_type};base64,{b64_str}"


class WasteImageClassifier:
    """Classify a photographed waste item into organic, recyclable, solid, or unknown."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini") -> None:
        """Initialize the classifier with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()

    async def classify(
        self,
        image_b64: bytes,
        *,
        media_type: str = "image/jpeg",
        text_hint: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return category, sub_types, confidence, latency and usage for an image.

        Args:
            image_b64: Base64-encoded image bytes.
            media_type: Media type of the encoded image.
            text_hint: Optional resident message sent with the photo.
        """
        start_time = time.time()
        inputs = self._build_inputs(image_b64, media_type, text_hint)
        response = await self._create_response(inputs)
        result = self._parse_response(response)
        result["latency"] = time.time() - start_time
        result.update(extract_usage(response))
        return result

    def _build_inputs(self, image_b64: bytes, media_type: str, text_hint: Optional[str]) -> List[Dict[str, Any]]:
        """Build the Responses API input array with the image as its own entry."""
        return [
            {"type": "message", "role": "system", "content": [{"type": "input_text", "text": self.system_prompt}]},
            {"type": "message", "role": "user", "content": [{"type": "input_text", "text": build_user_prompt(text_hint)}]},
            {
                "type": "message",
                "role": "user",
                "content": [{"type": "input_image", "image_url": to_image_data_url(image_b64, media_type)}],
            },
        ]

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the multimodal request to the OpenAI Responses API."""
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": FUNCTION_NAME},
            )
        except Exception as exc:
            logging.error("Error during OpenAI Responses API call: %s", exc)
            raise

    def _parse_response(self, response: Any) -> Dict[str, Any]:
        """Parse the classification output from the model."""
        try:
            return parse_function_call(response, tool_name=FUNCTION_NAME)
        except Exception as exc:
            logging.error("Error parsing OpenAI response: %s", exc)
            logging.error("Full response object: %r", response)
            raise
