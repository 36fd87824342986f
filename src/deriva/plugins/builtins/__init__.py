"""Built-in plugins shipped with deriva."""
