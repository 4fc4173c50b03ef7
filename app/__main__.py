from __future__ import annotations

from app.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
