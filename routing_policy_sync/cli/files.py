"""Reading and writing local policy graph files (JSON or YAML)."""

import json
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import DocumentFormatError
from ..graph import PolicyGraph

YAML_SUFFIXES = (".yaml", ".yml")


def load_graph_file(path: str) -> PolicyGraph:
    """
    Load a graph from a JSON or YAML file, chosen by suffix.

    Raises:
        DocumentFormatError: If the file is not a valid graph
        GraphError: If the graph breaks a structural rule
    """
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")

    try:
        if file_path.suffix.lower() in YAML_SUFFIXES:
            data: Any = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise DocumentFormatError(f"Invalid graph file {path}: {e}")

    if not isinstance(data, dict):
        raise DocumentFormatError(
            f"Invalid graph file {path}: expected a mapping at the top level, got {type(data).__name__}"
        )

    try:
        return PolicyGraph.from_dict(data)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise DocumentFormatError(f"Invalid graph file {path}: {e}")


def save_graph_file(graph: PolicyGraph, path: str) -> None:
    """Write a graph to a JSON or YAML file, chosen by suffix."""
    file_path = Path(path)
    data = graph.to_dict()

    if file_path.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    else:
        text = json.dumps(data, indent=2) + "\n"

    file_path.write_text(text, encoding="utf-8")
