"""Logging utilities for NewsMapper.

Provides YAML-based logging configuration and a query-context adapter.
All loggers are namespaced under 'newsmapper'.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, MutableMapping, Optional

import yaml


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging from the YAML configuration file.

    Falls back to basicConfig if the YAML file is not found.

    Args:
        config_path: Path to logging.yaml (defaults to config/logging.yaml).
        log_level: Override log level (e.g., "DEBUG", "INFO", "WARNING").
        log_file: Write records to this file in addition to the console.
    """
    if config_path is None:
        config_path = str(Path(__file__).parent.parent.parent / "config" / "logging.yaml")

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        if log_file:
            file_handler = {
                "class": "logging.FileHandler",
                "filename": log_file,
                "encoding": "utf-8",
            }
            if "standard" in cfg.get("formatters", {}):
                file_handler["formatter"] = "standard"
            cfg.setdefault("handlers", {})["file"] = file_handler
            for logger_cfg in cfg.get("loggers", {}).values():
                logger_cfg.setdefault("handlers", []).append("file")

        if log_level and "loggers" in cfg:
            for logger_cfg in cfg["loggers"].values():
                logger_cfg["level"] = log_level.upper()

        logging.config.dictConfig(cfg)
    else:
        logging.basicConfig(
            level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            filename=log_file,
        )


def get_logger(name: str) -> logging.Logger:
    """Get a namespaced logger under 'newsmapper'.

    Args:
        name: Module or component name (e.g., "analysis.query_builder").

    Returns:
        Logger instance with full 'newsmapper.<name>' namespace.
    """
    if name.startswith("newsmapper"):
        return logging.getLogger(name)
    return logging.getLogger(f"newsmapper.{name}")


class QueryContextAdapter(logging.LoggerAdapter):
    """Logger adapter that prefixes every record with the active query.

    Usage:
        logger = get_query_logger("pipeline", query="(oil OR gas)")
        logger.info("Fetching tone timeline")
        # Output: [INFO] newsmapper.pipeline: [q=(oil OR gas)] Fetching tone timeline
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        query = self.extra.get("query", "")
        return f"[q={query:.80}] {msg}", kwargs


def get_query_logger(name: str, query: str) -> QueryContextAdapter:
    """Get a logger adapter bound to a compiled query string."""
    return QueryContextAdapter(get_logger(name), {"query": query})
