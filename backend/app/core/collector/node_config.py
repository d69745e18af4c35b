############################################################
#
# etlive - ET Live Data Server
#
# node_config.py: Node list loading from the TOML config file
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Load the configured node list.

Expected layout::

    [[nodes]]
    node_id = "ET1002"
    data_endpoint = "http://10.0.0.12:8000/api/last"
    location = "Glennan Building, CWRU, OH"
"""

import tomllib
from pathlib import Path
from typing import List, Union

from pydantic import AnyHttpUrl, BaseModel, TypeAdapter, ValidationError, field_validator

from backend.app.core.collector.exceptions import ConfigError
from backend.app.logging_config import get_logger

logger = get_logger(__name__)

_http_url = TypeAdapter(AnyHttpUrl)


class NodeConfigEntry(BaseModel):
    """One [[nodes]] table."""

    node_id: str
    data_endpoint: str
    location: str = ""

    @field_validator("node_id", "data_endpoint")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("data_endpoint")
    @classmethod
    def http_url(cls, v: str) -> str:
        try:
            _http_url.validate_python(v)
        except ValidationError:
            raise ValueError(f"not a valid http:// or https:// URL: {v!r}") from None
        return v


class ConfigFile(BaseModel):
    """Top-level node configuration document."""

    nodes: List[NodeConfigEntry]


def parse_node_config(document: dict) -> List[NodeConfigEntry]:
    """Validate an already-parsed config document."""
    try:
        config = ConfigFile.model_validate(document)
    except ValidationError as e:
        raise ConfigError(f"invalid node configuration: {e}") from e

    if not config.nodes:
        raise ConfigError("node configuration lists no nodes")
    return config.nodes


def load_node_config(path: Union[str, Path]) -> List[NodeConfigEntry]:
    """
    Read and validate the node configuration file.

    Args:
        path: Path to the TOML file

    Returns:
        Validated node entries, in file order

    Raises:
        ConfigError: if the file is missing, unparsable, invalid or empty
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            document = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"node configuration not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"cannot parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    entries = parse_node_config(document)
    logger.info("node_config_loaded", path=str(path), nodes=len(entries))
    return entries
