"""Entry point for the figmant-rag server."""

from figmant_rag.config import get_host, get_port, get_transport
from figmant_rag.server import configure_logging, create_server


def main() -> None:
    """Run the figmant-rag server over HTTP (default) or stdio."""
    configure_logging()
    server = create_server()
    if get_transport() == "stdio":
        server.run(transport="stdio")
    else:
        server.run(transport="http", host=get_host(), port=get_port())


if __name__ == "__main__":
    main()
