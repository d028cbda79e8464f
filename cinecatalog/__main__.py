"""Run the catalog ingestion CLI: ``python -m cinecatalog``."""

from cinecatalog.etl.pipeline.cli import main

if __name__ == "__main__":
    main()
