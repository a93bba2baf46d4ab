from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from compound_core.domain.models import CATEGORIES, BudgetItem

REQUIRED_COLUMNS = {"name", "amount", "frequency", "category"}


def load_budget_items(csv_path: str | Path) -> List[BudgetItem]:
    """
    Read budget items from a CSV with name,amount,frequency,category and optional id,parent_id.
    Rows without an id are numbered in file order.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    df = pd.read_csv(path, dtype=str)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in budget CSV: {missing}")

    df["category"] = df["category"].str.strip().str.lower()
    unknown = set(df["category"]) - set(CATEGORIES)
    if unknown:
        raise ValueError(f"Unknown budget categories: {unknown}")

    items: List[BudgetItem] = []
    for i, row in df.iterrows():
        item_id = row.get("id")
        parent_id = row.get("parent_id")
        items.append(
            BudgetItem(
                id=str(item_id) if pd.notna(item_id) else f"csv-{i + 1}",
                name=str(row["name"]),
                amount=float(row["amount"]),
                frequency=str(row["frequency"]).strip().lower(),
                category=row["category"],
                parent_id=str(parent_id) if pd.notna(parent_id) else None,
            )
        )
    return items
