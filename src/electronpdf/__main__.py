"""Allow ``python -m electronpdf``."""

from electronpdf.ui.cli import main


if __name__ == "__main__":
    main()
