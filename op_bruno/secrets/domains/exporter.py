"""Write an extracted SecretMap to JSON or YAML."""
import json
import logging
from pathlib import Path

import yaml

from .models import SecretMap, count_secrets, secret_map_to_dict

logger = logging.getLogger(__name__)

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yml", ".yaml")


def render_secrets(secret_map: SecretMap, suffix: str) -> str:
    """Render the SecretMap in the format implied by a file suffix."""
    data = secret_map_to_dict(secret_map)
    suffix = suffix.lower()
    if suffix in JSON_SUFFIXES:
        return json.dumps(data, indent=2) + "\n"
    if suffix in YAML_SUFFIXES:
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    raise ValueError(f"Unsupported output format '{suffix}', use .json, .yml or .yaml")


def export_secrets(secret_map: SecretMap, output_path) -> int:
    """
    Write the SecretMap to ``output_path``.

    Returns:
        Number of secrets written
    """
    path = Path(output_path)
    content = render_secrets(secret_map, path.suffix)
    path.write_text(content, encoding="utf-8")
    total = count_secrets(secret_map)
    logger.info(f"Exported {total} secret(s) to {path}")
    return total
