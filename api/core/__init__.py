"""
Shared, cross-cutting code for the app.

`core/` should contain small building blocks that multiple features use
(DB wiring, templates, logging). Keep feature-specific SQL and business logic
in the corresponding feature package (e.g. `todos/`).
"""
