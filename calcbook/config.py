"""
Configuration - loads rules/calcbook.yaml.

A missing or unreadable file falls back to built-in defaults with a
warning; the defaults match the shipped YAML.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .workbook.model import CALCULATIONS_SHEET, PROPOSAL_SHEET

logger = logging.getLogger(__name__)

RULES_DIR = Path(__file__).parent / "rules"
DEFAULT_CONFIG_PATH = RULES_DIR / "calcbook.yaml"

DEFAULT_HEADER_ALIASES: Dict[str, List[str]] = {
    'description': ['digitizer item', 'item', 'description'],
    'estimate': ['estimate', 'estimate category'],
    'page': ['page', 'sheet'],
    'takeoff': ['total', 'takeoff', 'quantity'],
    'unit': ['units', 'unit', 'uom'],
    'count': ['count'],
    'length': ['length'],
    'width': ['width'],
    'height': ['height'],
}


@dataclass
class CalcbookConfig:
    """Resolved configuration for one pipeline run."""
    calculations_sheet: str = CALCULATIONS_SHEET
    proposal_sheet: str = PROPOSAL_SHEET
    merge_singletons: bool = True
    header_aliases: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_HEADER_ALIASES.items()}
    )
    aggregation_overrides: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    proposal: Dict[str, Any] = field(default_factory=dict)
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> 'CalcbookConfig':
        data = data or {}
        sheets = data.get('sheets') or {}
        aliases = {k: list(v) for k, v in DEFAULT_HEADER_ALIASES.items()}
        for key, names in (data.get('header_aliases') or {}).items():
            aliases[key] = [str(n).strip().lower() for n in (names or [])]
        proposal = dict(data.get('proposal') or {})
        proposal.setdefault('sheet_name', sheets.get('calculations', CALCULATIONS_SHEET))
        return cls(
            calculations_sheet=sheets.get('calculations', CALCULATIONS_SHEET),
            proposal_sheet=sheets.get('proposal', PROPOSAL_SHEET),
            merge_singletons=bool(data.get('merge_singletons', True)),
            header_aliases=aliases,
            aggregation_overrides=data.get('aggregation_overrides') or {},
            proposal=proposal,
            source=source,
        )


def _default_config() -> Dict[str, Any]:
    """Built-in configuration, used when the YAML cannot be read."""
    return {
        'sheets': {
            'calculations': CALCULATIONS_SHEET,
            'proposal': PROPOSAL_SHEET,
        },
        'merge_singletons': True,
        'header_aliases': {k: list(v) for k, v in DEFAULT_HEADER_ALIASES.items()},
        'aggregation_overrides': {},
        'proposal': {
            'placeholder': '#',
            'default_reference': '##',
            'rounding_step': 5,
        },
    }


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except Exception as e:
        logger.warning(f"Could not load config {path}: {e}; using defaults")
        return _default_config()
    if not isinstance(data, dict):
        logger.warning(f"Config {path} is not a mapping; using defaults")
        return _default_config()
    return data


def load_config(path: Optional[Union[str, Path]] = None) -> CalcbookConfig:
    """
    Load configuration from YAML.

    Args:
        path: Config file; defaults to the packaged rules/calcbook.yaml

    Returns:
        CalcbookConfig
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    data = _load_yaml(config_path)
    config = CalcbookConfig.from_dict(data, source=config_path)
    logger.debug(f"Loaded config from {config_path}")
    return config
