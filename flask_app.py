"""Flask application entry point.

``create_app`` lives in the ``app`` package; this module builds the
default application for ``flask run`` and WSGI servers."""
from app import create_app
from config import Config

__all__ = ["app", "create_app"]

app = create_app(Config)

if __name__ == "__main__":  # pragma: no cover - manual run helper
    # threaded so the page can call the API on the same server
    app.run(debug=True, host="0.0.0.0", port=5000, threaded=True)
