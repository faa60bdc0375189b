"""Module entrypoint for ``python -m console_api`` CLI usage."""

from console_api.cli import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
