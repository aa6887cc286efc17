# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd


def records_to_dataframe(records: List[Dict[str, Any]]) -> pd.DataFrame:
    """Convert Strapi records to a DataFrame, flattening nested objects into dotted columns.

    Non-mapping entries are skipped. An empty input yields an empty DataFrame.
    """
    rows = [r for r in records if isinstance(r, dict)]
    if not rows:
        return pd.DataFrame()
    return pd.json_normalize(rows, sep=".")


def strip_system_keys(record: Dict[str, Any]) -> Dict[str, Any]:
    """Remove Strapi bookkeeping keys (``id``, ``documentId``, timestamps, ``locale``) from a record dict."""
    return {k: v for k, v in record.items() if k not in _SYSTEM_KEYS}


_SYSTEM_KEYS = frozenset({"id", "documentId", "createdAt", "updatedAt", "publishedAt", "locale"})
