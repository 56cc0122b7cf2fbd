"""
ForkYes - Model Router.

Selects the model and sampling budget for each AI request type.

Request types:
- meal_suggestions: creative generation -> gpt-4, warm
- shopping_list: consolidation, mostly bookkeeping -> gpt-3.5-turbo, cool
- meal_modification: constrained rewrite -> gpt-4, in between
"""

from typing import Literal, TypedDict

RequestType = Literal["meal_suggestions", "shopping_list", "meal_modification"]


class ModelConfig(TypedDict):
    """Configuration for one completion call."""

    model: str
    temperature: float
    max_tokens: int


REQUEST_CONFIGS: dict[str, ModelConfig] = {
    "meal_suggestions": {
        "model": "gpt-4",
        "temperature": 0.7,
        "max_tokens": 2000,
    },
    "shopping_list": {
        "model": "gpt-3.5-turbo",
        "temperature": 0.3,
        "max_tokens": 1500,
    },
    "meal_modification": {
        "model": "gpt-4",
        "temperature": 0.5,
        "max_tokens": 1500,
    },
}

# Settings field holding the model override for each request type
_MODEL_OVERRIDES: dict[str, str] = {
    "meal_suggestions": "suggestion_model",
    "shopping_list": "shopping_model",
    "meal_modification": "modification_model",
}


def get_request_config(request_type: RequestType | str, settings=None) -> ModelConfig:
    """
    Get the completion config for a request type.

    Args:
        request_type: One of the REQUEST_CONFIGS keys
        settings: Optional Settings; a non-empty model override replaces
            the default model

    Raises:
        KeyError: unknown request type
    """
    config = REQUEST_CONFIGS[request_type].copy()

    if settings is not None:
        override = getattr(settings, _MODEL_OVERRIDES[request_type], None)
        if override:
            config["model"] = override

    return config
