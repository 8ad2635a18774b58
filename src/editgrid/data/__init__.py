"""Stateful engine components owned by a DataTable."""
