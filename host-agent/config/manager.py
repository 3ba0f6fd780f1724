#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management module for the Volume Agent.
This module handles agent configuration loading and validation.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from volumes import DEFAULT_DEVICES
from orchestration.attach import DEFAULT_POLL_INTERVAL

logger = logging.getLogger("volume-agent")

DEFAULT_CONFIG_PATH = "/etc/volume-agent/agent.json"


class ConfigManager:
    """Manager for configuration operations."""

    def __init__(self, config_path: str = ""):
        self.config_path = config_path or os.environ.get("VOLUME_AGENT_CONFIG", DEFAULT_CONFIG_PATH)

    def load_agent_config(self) -> Dict[str, Any]:
        """Load agent config and validate it.
        Precedence: env > JSON file > built-in defaults.
        - bind_host / bind_port: API listener
        - logging.level: log level name
        - aws.region / aws.endpoint_url / aws.metadata_url / aws.metadata_timeout
        - devices: ordered device-path pool
        - attach.poll_interval_seconds: delay between attach status polls
        A missing file means defaults; a parse/syntax error or an invalid value
        is fatal and the agent will NOT start.
        """
        cfg: Dict[str, Any] = {
            "bind_host": "0.0.0.0",
            "bind_port": 8080,
            "logging": {"level": "INFO"},
            "aws": {},
            "devices": list(DEFAULT_DEVICES),
            "attach": {"poll_interval_seconds": DEFAULT_POLL_INTERVAL},
        }
        file_cfg = self._read_file()
        if "bind_host" in file_cfg and isinstance(file_cfg["bind_host"], str):
            cfg["bind_host"] = file_cfg["bind_host"]
        if "bind_port" in file_cfg:
            cfg["bind_port"] = self._int("bind_port", file_cfg["bind_port"])
        for section in ("logging", "aws", "attach"):
            value = file_cfg.get(section)
            if value is None:
                continue
            if not isinstance(value, dict):
                raise RuntimeError(f"Invalid '{section}' section in '{self.config_path}': expected an object")
            cfg[section].update(value)
        if "devices" in file_cfg:
            cfg["devices"] = self._devices(file_cfg["devices"])

        # Environment overrides
        if os.environ.get("VOLUME_AGENT_BIND_HOST"):
            cfg["bind_host"] = os.environ["VOLUME_AGENT_BIND_HOST"]
        if os.environ.get("VOLUME_AGENT_BIND_PORT"):
            cfg["bind_port"] = self._int("VOLUME_AGENT_BIND_PORT", os.environ["VOLUME_AGENT_BIND_PORT"])
        if os.environ.get("VOLUME_AGENT_LOG_LEVEL"):
            cfg["logging"]["level"] = os.environ["VOLUME_AGENT_LOG_LEVEL"]
        if os.environ.get("AWS_REGION"):
            cfg["aws"]["region"] = os.environ["AWS_REGION"]

        try:
            interval = float(cfg["attach"].get("poll_interval_seconds", DEFAULT_POLL_INTERVAL))
        except (TypeError, ValueError) as e:
            raise RuntimeError(f"Invalid attach.poll_interval_seconds: {e}") from e
        if interval < 0:
            raise RuntimeError("Invalid attach.poll_interval_seconds: must not be negative")
        cfg["attach"]["poll_interval_seconds"] = interval
        return cfg

    def _read_file(self) -> Dict[str, Any]:
        p = Path(self.config_path)
        if not p.exists():
            logger.info("Config file %s not found, using defaults", p)
            return {}
        with p.open("r", encoding="utf-8") as f:
            try:
                file_cfg = json.load(f)
            except json.JSONDecodeError as e:
                # Fail fast: do not start the agent with an invalid config
                raise RuntimeError(f"Invalid JSON in VOLUME_AGENT_CONFIG='{p}': {e}") from e
        if not isinstance(file_cfg, dict):
            raise RuntimeError(f"Invalid config in '{p}': expected a JSON object")
        return file_cfg

    @staticmethod
    def _int(name: str, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise RuntimeError(f"Invalid {name}: {value!r}") from e

    @staticmethod
    def _devices(value: Any) -> List[str]:
        if not isinstance(value, list) or not value:
            raise RuntimeError("Invalid devices: expected a non-empty list of device paths")
        for device in value:
            if not isinstance(device, str) or not device.startswith("/dev/"):
                raise RuntimeError(f"Invalid device path {device!r}")
        if len(set(value)) != len(value):
            raise RuntimeError(f"Invalid devices: duplicate entries in {value}")
        return list(value)
