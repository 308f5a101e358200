# Placement tracker: application board, stage moves, and per-user persistence
#
# Components:
#   errors.py      - Error taxonomy (ValidationError, NotFoundError, ...)
#   schema.py      - Data model (Stage, User, UserRecord, Application)
#   store.py       - In-memory application list with change notification
#   resolver.py    - Drag-and-drop drop-target resolution
#   persistence.py - Per-user durable records (SQLite or in-memory backend)
#   session.py     - Login, signup, logout and session restore
#   tracker.py     - Wires the pieces together
#   config.py      - YAML configuration
