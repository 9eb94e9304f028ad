# invoice_engine/services/asset_service.py

import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict

from reportlab.lib.utils import ImageReader

from invoice_engine.config import ASSET_DIR
from invoice_engine.core.errors import AssetLoadFailure
from invoice_engine.models import SignerName

logger = logging.getLogger(__name__)


def signature_asset(signer: SignerName) -> str:
    """Asset key of the signature image composited above the signatory line."""
    return f"signature_{signer.value}"


ASSET_FILES = {
    "logo": "logo.ppm",
    "phone": "phone.ppm",
    "email": "email.ppm",
    "rupee": "rupee.ppm",
    "rupee_light": "rupee_light.ppm",  # for dark fills
}
ASSET_FILES.update({signature_asset(signer): f"{signature_asset(signer)}.ppm" for signer in SignerName})


class AssetLibrary:
    """
    Read-only set of decoded images shared by every render call.
    """
    def __init__(self, images: Dict[str, ImageReader]):
        self._images = MappingProxyType(dict(images))

    def __getitem__(self, key: str) -> ImageReader:
        return self._images[key]


def load_assets(asset_dir: Path) -> AssetLibrary:
    """
    Loads and decodes every required image from `asset_dir`.

    Raises:
        AssetLoadFailure: if any file is missing or cannot be decoded. A header
            without its logo or icons is not a correct invoice, so nothing is skipped.
    """
    asset_dir = Path(asset_dir)
    images = {}
    for key, file_name in ASSET_FILES.items():
        path = asset_dir / file_name
        if not path.is_file():
            raise AssetLoadFailure(f"Required asset '{key}' not found at {path}")
        try:
            reader = ImageReader(str(path))
            reader.getRGBData()  # decode now rather than at first draw
        except (OSError, ValueError) as e:
            raise AssetLoadFailure(f"Required asset '{key}' at {path} could not be decoded: {e}") from e
        images[key] = reader

    logger.info("Loaded %d invoice assets from %s", len(images), asset_dir)
    return AssetLibrary(images)


@lru_cache(maxsize=1)
def get_asset_library() -> AssetLibrary:
    """The process-wide asset library, loaded once from ASSET_DIR."""
    return load_assets(ASSET_DIR)
