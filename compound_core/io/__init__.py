from compound_core.io.budget_csv import load_budget_items  # noqa: F401
from compound_core.io.config import load_report_config  # noqa: F401
from compound_core.io.store import (  # noqa: F401
    export_data,
    import_data,
    load_store,
    save_store,
)

__all__ = ["load_budget_items", "load_report_config", "load_store", "save_store", "export_data", "import_data"]
