"""Layout data model and placement algorithms."""
