"""tksheet host binding for DataTable."""

from .sheet_host import SheetHost, create_sheet

__all__ = ["SheetHost", "create_sheet"]
