"""HTTP API for the rostercap transfer engine."""
