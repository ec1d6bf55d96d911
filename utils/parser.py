"""
ARFF reading for labeled numeric datasets.

Turns an .arff file into an ordered list of `Record` objects (numeric
attributes + the class label from the last column) and fills a
`ClassRegistry` as records are created. All attribute columns must be
numeric; the clustering and kNN code assume equal-length float vectors.

References
----------
[1] Weka ARFF format, https://waikato.github.io/weka-wiki/formats_and_processing/arff/
"""

import os
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.io import arff

from .errors import FormatError
from .records import ClassRegistry, Record


def load_arff(filepath: str) -> pd.DataFrame:
    """
    Loads an .arff file from the given path into a pandas DataFrame.

    Nominal columns come back from scipy as byte strings and are decoded to
    str.

    Raises
    ------
    FileNotFoundError
        If `filepath` does not exist.
    FormatError
        If scipy cannot parse the file.
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Dataset not found: {filepath}")

    try:
        data, _meta = arff.loadarff(filepath)
    except (ValueError, arff.ParseArffError) as exc:
        raise FormatError(f"Could not parse ARFF file {filepath}: {exc}") from exc
    df = pd.DataFrame(data)

    for col in df.columns:
        if df[col].dtype == object:
            df[col] = df[col].apply(
                lambda v: v.decode("utf-8") if isinstance(v, (bytes, bytearray)) else v
            )

    return df


def get_class_column_name(df: pd.DataFrame) -> str:
    """The class is the last column, as in UCI/Weka datasets."""
    return df.columns[-1]


def records_from_dataframe(
        df: pd.DataFrame,
        class_column: Optional[str] = None,
        registry: Optional[ClassRegistry] = None,
) -> Tuple[List[Record], ClassRegistry]:
    """
    Converts a DataFrame into records, registering every label seen.

    Parameters
    ----------
    df : pd.DataFrame
        One row per record.
    class_column : str, optional
        Name of the label column. Defaults to the last column.
    registry : ClassRegistry, optional
        Registry to extend (e.g. shared between a train and a test file).
        A new one is created if omitted.

    Returns
    -------
    records : List[Record]
    registry : ClassRegistry

    Raises
    ------
    FormatError
        If an attribute column is not numeric or holds missing values.
    """
    if registry is None:
        registry = ClassRegistry()
    if df.shape[1] < 2:
        raise FormatError("Expected at least one attribute column plus a class column.")
    if class_column is None:
        class_column = get_class_column_name(df)

    feature_cols = [col for col in df.columns if col != class_column]
    try:
        X = df[feature_cols].apply(pd.to_numeric, errors="raise").to_numpy(dtype=float)
    except (ValueError, TypeError) as exc:
        raise FormatError(f"Non-numeric attribute value: {exc}") from exc
    if np.isnan(X).any():
        row = int(np.where(np.isnan(X).any(axis=1))[0][0])
        raise FormatError(f"Missing attribute value in row {row}.")

    records = []
    for values, raw_label in zip(X, df[class_column]):
        # scipy reports missing nominal values as '?'
        label = None if pd.isna(raw_label) or raw_label == "?" else str(raw_label)
        registry.add(label)
        records.append(Record(values, label))

    return records, registry


def load_records(
        filepath: str,
        registry: Optional[ClassRegistry] = None,
        class_column: Optional[str] = None,
) -> Tuple[List[Record], ClassRegistry]:
    """Reads an .arff file straight into records plus the class registry."""
    df = load_arff(filepath)
    return records_from_dataframe(df, class_column=class_column, registry=registry)
