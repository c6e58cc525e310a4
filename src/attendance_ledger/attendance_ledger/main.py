from __future__ import annotations

import os

from . import create_app


def main() -> None:
    app = create_app()
    # The reloader would start a second scheduler in the child process.
    app.run(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        debug=app.config["DEBUG"],
        use_reloader=False,
    )


if __name__ == "__main__":
    main()
