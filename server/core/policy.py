#!/usr/bin/env python3
"""
Basic role-based authorization policy

Policy file (YAML or JSON), role -> object type -> allowed actions:

    Root:
      Topic: [All]
      Spu: [Read]
    Reader:
      Topic: [Read]
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Union

import yaml
from pydantic import TypeAdapter, ValidationError

from .errors import ConfigurationError

logger = logging.getLogger("streamctl.server")


class Action(str, Enum):
    CREATE = "Create"
    READ = "Read"
    UPDATE = "Update"
    DELETE = "Delete"
    ALL = "All"


class ObjectType(str, Enum):
    SPU = "Spu"
    CUSTOM_SPU = "CustomSpu"
    SPU_GROUP = "SpuGroup"
    TOPIC = "Topic"
    PARTITION = "Partition"
    SMART_MODULE = "SmartModule"
    TABLE_FORMAT = "TableFormat"


PolicyRules = Dict[str, Dict[ObjectType, List[Action]]]
_rules_adapter = TypeAdapter(PolicyRules)


class BasicRbacPolicy:
    """Role -> object type -> actions, loaded once at startup."""

    def __init__(self, rules: PolicyRules):
        self.rules = rules

    @classmethod
    def from_dict(cls, data) -> "BasicRbacPolicy":
        try:
            rules = _rules_adapter.validate_python(data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid authorization policy: {e}") from e
        return cls(rules)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "BasicRbacPolicy":
        """Read and validate a policy file; any problem is a ConfigurationError."""
        path = Path(path)
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"cannot read authorization policy {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"malformed authorization policy {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"authorization policy {path} must map roles to permissions")

        policy = cls.from_dict(data)
        logger.info("loaded authorization policy from %s (%d roles)", path, len(policy.rules))
        return policy
