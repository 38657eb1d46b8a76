"""Catalog of completion models users can pick from the App Home tab."""

from __future__ import annotations

from typing import List, Optional, Sequence

from pydantic import BaseModel

from ..config import load_model_catalog


class ModelOption(BaseModel):
    name: str
    id: str


def available_models() -> List[ModelOption]:
    return [ModelOption(**entry) for entry in load_model_catalog()]


def find_model(catalog: Sequence[ModelOption], model_id: str) -> Optional[ModelOption]:
    return next((m for m in catalog if m.id == model_id), None)
