import argparse
import logging
import sys

import uvicorn

from best_model_service.app import create_app
from best_model_service.config import load_config


def setup_logging(level: str) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def main(argv=None):
    cfg = load_config()
    ap = argparse.ArgumentParser(prog="best_model_service")
    ap.add_argument("--host", default=cfg.host)
    ap.add_argument("--port", type=int, default=cfg.port)
    ap.add_argument("--data-dir", default=cfg.data_dir)
    ap.add_argument("--log-level", default=cfg.log_level)
    args = ap.parse_args(argv)

    cfg.host, cfg.port, cfg.data_dir = args.host, args.port, args.data_dir
    cfg.log_level = args.log_level.upper()
    setup_logging(cfg.log_level)

    app = create_app(cfg)
    print(f"Server running at http://localhost:{cfg.port}")
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_config=None)


if __name__ == "__main__":
    main()
