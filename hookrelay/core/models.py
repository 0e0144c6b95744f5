"""Model registry mapping public model ids to webhook targets."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .exceptions import ModelNotFoundError

logger = logging.getLogger("hookrelay")

DEFAULT_OWNER = "n8n"


@dataclass(frozen=True)
class WebhookModel:
    """A model exposed to clients and backed by one webhook."""

    name: str
    webhook_url: str
    owned_by: str = DEFAULT_OWNER
    created: int = 0

    def to_openai(self) -> dict[str, Any]:
        return {
            "id": self.name,
            "object": "model",
            "created": self.created,
            "owned_by": self.owned_by,
        }


class ModelRegistry:
    """Lookup table for configured webhook models."""

    def __init__(self, models: Iterable[WebhookModel] = ()) -> None:
        self._models: dict[str, WebhookModel] = {}
        for model in models:
            self._models[model.name] = model

    def __len__(self) -> int:
        return len(self._models)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ModelRegistry":
        return cls(cls._parse_models(config.get("model_list") or []))

    def get(self, name: str) -> WebhookModel:
        model = self._models.get(name)
        if model is None:
            raise ModelNotFoundError(f"Model '{name}' not found")
        return model

    def names(self) -> list[str]:
        return list(self._models.keys())

    def list_models(self) -> list[WebhookModel]:
        return list(self._models.values())

    @staticmethod
    def _parse_models(entries: list[Any]) -> list[WebhookModel]:
        created = int(time.time())
        models: list[WebhookModel] = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                logger.warning("Skipping model entry that is not a mapping: %r", entry)
                continue
            name = entry.get("model_name")
            params = entry.get("model_params") or {}
            url = str(params.get("webhook_url") or "").strip()
            if not name or not url:
                logger.warning(
                    "Skipping model entry without model_name or webhook_url: %r", name
                )
                continue
            models.append(
                WebhookModel(
                    name=str(name),
                    webhook_url=url,
                    owned_by=str(params.get("owned_by") or DEFAULT_OWNER),
                    created=created,
                )
            )
            logger.debug("Registered model %s", name)
        return models
