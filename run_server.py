import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from advocat.api import config  # noqa: E402
from advocat.api.server import app  # noqa: E402

if __name__ == "__main__":
    # Check for production mode
    if config.APP_ENV == "production":
        from waitress import serve
        print(f"Starting production server with Waitress on port {config.PORT}...")
        serve(app, host="0.0.0.0", port=config.PORT)
    else:
        print("Starting development server...")
        app.run(debug=True, port=config.PORT, host="0.0.0.0")
