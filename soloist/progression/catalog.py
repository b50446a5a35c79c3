"""Mission catalog loading"""
from pathlib import Path
from typing import List, Union
import logging

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from soloist.exceptions import ConfigurationError
from soloist.models.mission import PredefinedMission

logger = logging.getLogger(__name__)

_catalog_adapter = TypeAdapter(List[PredefinedMission])


def parse_catalog(raw: Union[str, bytes, list]) -> List[PredefinedMission]:
    """Validate a catalog given as JSON text or already-decoded list"""
    try:
        if isinstance(raw, (str, bytes)):
            missions = _catalog_adapter.validate_json(raw)
        else:
            missions = _catalog_adapter.validate_python(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(
            message=f"Invalid mission catalog: {e}",
            config_key="mission_catalog",
            cause=e,
        )

    ids = [mission.id for mission in missions]
    duplicates = sorted({mission_id for mission_id in ids if ids.count(mission_id) > 1})
    if duplicates:
        raise ConfigurationError(
            message=f"Duplicate mission ids in catalog: {', '.join(duplicates)}",
            config_key="mission_catalog",
        )
    return missions


def load_catalog_file(path: Path) -> List[PredefinedMission]:
    """Load the predefined mission catalog from a JSON file"""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(
            message=f"Mission catalog not found: {path}",
            config_key="mission_catalog",
        )
    missions = parse_catalog(path.read_text(encoding="utf-8"))
    logger.info(f"Loaded {len(missions)} missions from {path}")
    return missions

