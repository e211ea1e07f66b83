"""
Tabular Data Parser.

Turns the comma-delimited text stored on a CMS section into an ordered list
of records keyed by header name.  pandas does the splitting; typing is done
per cell afterwards so a column may mix numbers and strings:

- a cell whose whole trimmed text is a number becomes int/float
- anything else stays a (trimmed) string
- a row shorter than the header gets None for the missing cells
- cells beyond the header width are dropped

Quoting beyond what the caller already escaped is not supported; a value
containing the delimiter is a caller contract violation.
"""

import io
import logging
import warnings
from typing import Any, Dict, List

import pandas as pd

from ..core.utils import parse_number

logger = logging.getLogger(__name__)


def _type_cell(value) -> Any:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    number = parse_number(text)
    return text if number is None else number


def parse_chart_frame(text: str) -> pd.DataFrame:
    """Read delimited text into a string-typed DataFrame with trimmed headers.

    Args:
        text: Raw delimited text; the first line is the header row

    Returns:
        DataFrame of untyped (str) cells, empty when the input is blank
    """
    if text is None or not str(text).strip():
        return pd.DataFrame()

    with warnings.catch_warnings():
        # Rows wider than the header are truncated on purpose
        warnings.simplefilter("ignore", category=pd.errors.ParserWarning)
        df = pd.read_csv(
            io.StringIO(str(text).strip()),
            sep=',',
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            quoting=3,  # csv.QUOTE_NONE
        )
    df.columns = [str(c).strip() for c in df.columns]
    return df


def parse_chart_data(text: str) -> List[Dict[str, Any]]:
    """Parse delimited text into typed records.

    Args:
        text: Raw delimited text; the first line is the header row

    Returns:
        List of dicts in row order, keys in header order.  Empty input
        returns an empty list.
    """
    df = parse_chart_frame(text)
    if df.empty:
        return []

    records = [
        {column: _type_cell(value) for column, value in row.items()}
        for row in df.to_dict(orient='records')
    ]
    logger.debug(f"[Parser] Parsed {len(records)} rows x {len(df.columns)} columns")
    return records
