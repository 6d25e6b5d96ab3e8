import sys
import logging
import argparse
from stash import create_app

log = logging.getLogger('werkzeug')
log.disabled = True
cli = sys.modules['flask.cli']
cli.show_server_banner = lambda *x: None


def main() -> None:
    p = argparse.ArgumentParser(prog="stash")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=3000)
    args = p.parse_args()

    app = create_app()
    print(f"Stash starting on http://{args.host}:{args.port}", flush=True)
    print(f"API endpoint: http://{args.host}:{args.port}/api/bookmarks", flush=True)
    app.run(host=args.host, port=args.port, debug=False)

if __name__ == "__main__":
    main()
