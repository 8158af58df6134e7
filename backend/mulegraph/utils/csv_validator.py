"""
CSV validation utilities for MuleGraph.
"""

from typing import Any, Dict, List

import pandas as pd

from mulegraph.models.entities import Transaction


REQUIRED_COLUMNS = [
    "transaction_id",
    "sender_id",
    "receiver_id",
    "amount",
    "timestamp",
]
ID_COLUMNS = ["transaction_id", "sender_id", "receiver_id"]


def _failure(errors: List[str], warnings: List[str]) -> Dict[str, Any]:
    return {
        "valid": False,
        "errors": errors,
        "warnings": warnings,
        "row_count": 0,
        "account_count": 0,
        "transactions": [],
    }


def validate_csv(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Validate a transaction DataFrame and convert it to ``Transaction`` rows.

    Errors are reported per row (1-based, header excluded). Nothing is
    converted unless every row is valid.
    """
    errors: List[str] = []
    warnings: List[str] = []

    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        errors.append(f"Missing required columns: {', '.join(missing_columns)}")
        return _failure(errors, warnings)

    row_count = len(df)
    if row_count == 0:
        errors.append("CSV file is empty - no data rows found")
        return _failure(errors, warnings)

    ids = {col: df[col].astype(str).str.strip() for col in ID_COLUMNS}
    missing = df[REQUIRED_COLUMNS].isnull().any(axis=1)
    for col in ID_COLUMNS:
        missing |= ids[col] == ""

    amounts = pd.to_numeric(df["amount"], errors="coerce")
    timestamps = pd.to_datetime(df["timestamp"], errors="coerce", utc=True, format="mixed")

    for position in range(row_count):
        row_number = position + 1
        if missing.iloc[position]:
            errors.append(f"Row {row_number}: Missing required fields")
            continue
        amount = amounts.iloc[position]
        if pd.isna(amount) or amount < 0:
            errors.append(f"Row {row_number}: Invalid amount: {df['amount'].iloc[position]}")
            continue
        if pd.isna(timestamps.iloc[position]):
            errors.append(
                f"Row {row_number}: Invalid timestamp: {df['timestamp'].iloc[position]}"
            )

    if errors:
        return _failure(errors, warnings)

    duplicate_transaction_ids = ids["transaction_id"].duplicated().sum()
    if duplicate_transaction_ids > 0:
        warnings.append(
            f"Found {duplicate_transaction_ids} duplicate transaction_id values"
        )

    frame = pd.DataFrame(
        {
            "transaction_id": ids["transaction_id"],
            "sender_id": ids["sender_id"],
            "receiver_id": ids["receiver_id"],
            "amount": amounts.astype(float),
            "timestamp": timestamps,
        }
    )
    transactions = [
        Transaction(
            transaction_id=row.transaction_id,
            sender_id=row.sender_id,
            receiver_id=row.receiver_id,
            amount=float(row.amount),
            timestamp=row.timestamp.to_pydatetime(),
        )
        for row in frame.itertuples(index=False)
    ]

    account_count = len(set(frame["sender_id"]).union(set(frame["receiver_id"])))

    return {
        "valid": True,
        "errors": errors,
        "warnings": warnings,
        "row_count": row_count,
        "account_count": account_count,
        "transactions": transactions,
    }
