"""Schema definitions for the waste classification tool."""

from typing import Any, Dict

from models.waste_models import WasteCategory

FUNCTION_NAME = "classify_waste_image"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": "Return the waste category, detected item types, and confidence for the image.",
    "parameters": {
        "type": "object",
        "properties": {
            "category": {
                "type": "string",
                "description": "Coarse waste category of the pictured items.",
                "enum": [category.value for category in WasteCategory],
            },
            "sub_types": {
                "type": "array",
                "description": "Detected item types, most prominent first, e.g. 'banana peel'.",
                "items": {"type": "string"},
            },
            "confidence": {
                "type": "number",
                "description": "Confidence in the category, between 0 and 1.",
            },
        },
        "required": ["category", "sub_types", "confidence"],
        "additionalProperties": False,
    },
    "strict": True,
}
