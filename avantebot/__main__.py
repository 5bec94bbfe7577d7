"""Run the bot with Flask's threaded development server: ``python -m avantebot``."""

import os

from avantebot.index import create_app


def main() -> None:
    app = create_app()
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, threaded=True)


if __name__ == "__main__":
    main()
