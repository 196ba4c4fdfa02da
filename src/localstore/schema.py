"""
Schema definitions for localstore.

This module defines the configuration model and the shared type aliases used
throughout localstore:
- ConnectorConfig: Storage key namespace (prefix/postfix)
- SortDirection: Direction of one order key
- Record/Scope/Order: Shapes of stored rows and query expressions

Design Decisions:
    - Configuration is immutable once loaded (frozen=True)
    - Unknown configuration keys are rejected (extra="forbid")
    - Records stay plain dicts so they serialize to JSON unchanged
"""

from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field


# A stored row: field name -> JSON-compatible value
Record = dict[str, Any]

# A scope expression: simple field constraints and/or `$` operator keys
Scope = Mapping[str, Any]

# Field name -> "asc" | "desc"
Order = Mapping[str, str]


# =============================================================================
# Enums
# =============================================================================


class SortDirection(str, Enum):
    """Direction of one key in an order specification."""

    ASC = "asc"
    DESC = "desc"


# =============================================================================
# Configuration
# =============================================================================


class ConnectorConfig(BaseModel):
    """
    Construction-time configuration for a connector.

    The storage key of a table is ``prefix + table_name + postfix``, so two
    connectors with different namespaces never see each other's tables.

    Attributes:
        prefix: String prepended to every table name
        postfix: String appended to every table name
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    prefix: str = Field(
        default="",
        description="String prepended to every table name",
    )
    postfix: str = Field(
        default="",
        description="String appended to every table name",
    )


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def load_config(path: Path | str) -> ConnectorConfig:
    """
    Load a connector configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated ConnectorConfig object

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the YAML doesn't match the schema
    """
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f)

    return ConnectorConfig.model_validate(data or {})


def load_config_from_string(content: str) -> ConnectorConfig:
    """Load a connector configuration from a YAML string."""
    data = yaml.safe_load(content)
    return ConnectorConfig.model_validate(data or {})
