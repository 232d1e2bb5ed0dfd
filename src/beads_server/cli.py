"""beads-server CLI entry point"""

import argparse
import logging
import sys

import uvicorn

from .config import ConfigError, Settings, load_settings, setup_logging
from .main import VERSION, create_app
from .projects import ProjectsFileError, load_projects_file
from .storage.bead_store import BeadStore
from .storage.errors import SnapshotError
from .tenants import SingleTenantRegistry, build_multi_tenant_registry

logger = logging.getLogger(__name__)


def build_registry(settings: Settings):
    """Load the stores named by ``settings`` into a tenant registry"""
    if settings.multi_tenant:
        entries = load_projects_file(settings.projects_file)
        return build_multi_tenant_registry(entries, base_dir=settings.projects_file.parent)
    return SingleTenantRegistry(settings.token, BeadStore.load(settings.data_file))


def serve(settings: Settings):
    """Start the beads server"""
    setup_logging(settings.log_level)
    registry = build_registry(settings)
    app = create_app(registry)

    logger.info("beads-server %s listening on %s:%d", VERSION, settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="beads-server - issue tracker for agents and humans")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP server")
    serve_parser.add_argument("--host", help="Host to bind to (BS_HOST, default 0.0.0.0)")
    serve_parser.add_argument("--port", help="Port to bind to (BS_PORT, default 9999)")
    serve_parser.add_argument("--data-file", help="Snapshot file for single-tenant mode (BS_DATA_FILE)")
    serve_parser.add_argument("--token", help="Bearer token for single-tenant mode (BS_TOKEN)")
    serve_parser.add_argument("--projects", help="Projects file for multi-tenant mode (BS_PROJECTS_FILE)")
    serve_parser.add_argument("--log-level", help="Log level (BS_LOG_LEVEL, default INFO)")

    # Version command
    subparsers.add_parser("version", help="Print the version")
    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print(f"beads-server {VERSION}")
    elif args.command == "serve":
        try:
            settings = load_settings({
                "host": args.host,
                "port": args.port,
                "data_file": args.data_file,
                "token": args.token,
                "projects_file": args.projects,
                "log_level": args.log_level,
            })
            serve(settings)
        except (ConfigError, ProjectsFileError, SnapshotError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
