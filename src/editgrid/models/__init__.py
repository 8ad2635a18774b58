"""Value types shared by the engine: rows, actions, selection, events."""
