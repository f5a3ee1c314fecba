"""Legacy launcher for the Flask application.

Kept under the previous entry point name; delegates to the app defined
in ``flask_app.py``.
"""

from flask_app import app


if __name__ == "__main__":
    app.run(threaded=True)
