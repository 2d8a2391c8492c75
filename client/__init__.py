"""Python client for the taskboard API: session store, HTTP wrapper and kanban board."""
