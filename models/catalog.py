"""
Model catalog - looks models up on the Hugging Face Hub.
"""

import logging
import os
from typing import Optional

from huggingface_hub import HfApi

from utils.errors import CatalogError
from .asset import Asset, HUGGING_FACE

logger = logging.getLogger(__name__)


class HuggingFaceCatalog:
    """Maps Hugging Face Hub models to assets."""

    def __init__(self, hf_token: Optional[str] = None, api: Optional[HfApi] = None):
        self.hf_token = hf_token or os.environ.get("HF_TOKEN")
        self.api = api or HfApi(token=self.hf_token)

    @staticmethod
    def to_asset(info) -> Asset:
        """Map a hub model info object to an asset."""
        last_modified = getattr(info, "last_modified", None)
        return Asset(
            name=info.id,
            module=getattr(info, "library_name", None) or "",
            pipeline_tag=getattr(info, "pipeline_tag", None) or "",
            source=HUGGING_FACE,
            version=str(last_modified) if last_modified else ""
        )

    def get_model(self, name: str) -> Asset:
        """
        Look a model up by identifier.

        Raises:
            CatalogError: the model does not exist or the hub is unreachable
        """
        try:
            info = self.api.model_info(name)
        except Exception as e:
            logger.debug(f"Catalog lookup of {name} failed: {e}")
            raise CatalogError(name, str(e))
        return self.to_asset(info)
