#!/usr/bin/env python
"""
Neo4j Bolt proxy startup script.

Uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which closes the
driver before the process exits.
"""

import argparse
import uvicorn

from bolt_proxy.common.settings import Settings


def main():
    settings = Settings()
    parser = argparse.ArgumentParser(description='Neo4j Bolt proxy')
    parser.add_argument('--host', default=settings.host, help=f'Host to bind to (default: {settings.host})')
    parser.add_argument('--port', type=int, default=settings.port, help=f'Port to bind to (default: {settings.port})')
    parser.add_argument('--reload', action='store_true', help='Enable auto-reload (development)')

    args = parser.parse_args()

    uvicorn.run(
        'bolt_proxy.main:create_app',
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == '__main__':
    main()
