"""
Takeoff Ingest - reads the raw digitizer export into TakeoffRecords.

Accepts .xlsx/.xls and .csv. Header names are matched case-insensitively
through an alias table; the description, estimate and page columns are
required, everything else is optional.
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from .config import DEFAULT_HEADER_ALIASES
from .errors import TakeoffSchemaError
from .items.records import TakeoffRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('description', 'estimate', 'page')


def identify_columns(headers: Sequence, aliases: Optional[Mapping[str, List[str]]] = None) -> Dict[str, str]:
    """
    Map field names to the actual header labels present.

    Raises:
        TakeoffSchemaError: a required field has no matching header
    """
    aliases = aliases or DEFAULT_HEADER_ALIASES
    normalized = {str(h).strip().lower(): h for h in headers if h is not None}
    mapping: Dict[str, str] = {}
    for field_name, names in aliases.items():
        for name in names:
            if name.lower() in normalized:
                mapping[field_name] = normalized[name.lower()]
                break
    missing = [f for f in REQUIRED_FIELDS if f not in mapping]
    if missing:
        expected = ', '.join(repr(aliases.get(f, [f])[0]) for f in missing)
        raise TakeoffSchemaError(f"Takeoff header is missing required columns: {expected}")
    return mapping


def _text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _number(value) -> Optional[float]:
    if value is None or value == '':
        return None
    number = pd.to_numeric(value, errors='coerce')
    if pd.isna(number):
        return None
    return float(number)


def records_from_frame(df: pd.DataFrame, aliases: Optional[Mapping[str, List[str]]] = None) -> List[TakeoffRecord]:
    """
    Convert a takeoff DataFrame to records.

    raw_row is the 1-based sheet row (header is row 1). Rows with a blank
    description are skipped.
    """
    mapping = identify_columns(list(df.columns), aliases)
    df = df.reset_index(drop=True)

    def get(row, field_name):
        column = mapping.get(field_name)
        return row[column] if column is not None else None

    records = []
    for position, row in df.iterrows():
        description = _text(get(row, 'description'))
        if not description:
            continue
        records.append(TakeoffRecord(
            description=description,
            estimate_category=_text(get(row, 'estimate')),
            takeoff=_number(get(row, 'takeoff')),
            unit=_text(get(row, 'unit')),
            page=_text(get(row, 'page')),
            length=_number(get(row, 'length')),
            width=_number(get(row, 'width')),
            height=_number(get(row, 'height')),
            raw_row=int(position) + 2,
            count=_number(get(row, 'count')),
        ))
    logger.info(f"Read {len(records)} takeoff records ({len(df)} rows)")
    return records


def read_takeoff(path: Union[str, Path], sheet_name: Union[int, str] = 0,
                 aliases: Optional[Mapping[str, List[str]]] = None) -> List[TakeoffRecord]:
    """
    Read a takeoff export.

    Args:
        path: .xlsx, .xls or .csv file
        sheet_name: Worksheet for Excel input
        aliases: Header alias table (field -> accepted header names)
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in ('.xlsx', '.xlsm', '.xls'):
        df = pd.read_excel(path, sheet_name=sheet_name, dtype=object)
    elif suffix == '.csv':
        df = pd.read_csv(path, dtype=object, keep_default_na=False)
    else:
        raise ValueError(f"Unsupported takeoff format: {suffix}")
    logger.info(f"Loaded takeoff {path.name}: {len(df)} rows, {len(df.columns)} columns")
    return records_from_frame(df, aliases)
