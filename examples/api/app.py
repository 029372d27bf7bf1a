"""API — a versioned JSON API assembled from a route directory.

Every file under ``routes/`` is a route module. Its location is its URL::

    routes/v1/index.py              -> /api/v1
    routes/v1/greetings/index.py    -> /api/v1/greetings
    routes/v1/greetings/[name].py   -> /api/v1/greetings/:name
    routes/v2/greetings/[name].py   -> /api/v2/greetings/:name

Health check at /health, API reference at /api-docs.

Run:
    cd examples/api && python app.py
"""

from pathlib import Path

from wren import create_app, load_config

ROUTES = Path(__file__).parent / "routes"

app = create_app(load_config(docs_title="Greetings API"), routes_dir=ROUTES)

if __name__ == "__main__":
    app.run()
