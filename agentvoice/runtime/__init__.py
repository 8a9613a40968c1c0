# Lightweight package init; the app factory lives in runtime.server.
