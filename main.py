"""
CoronaDB Main Entry Point

    python main.py db owid-covid-data.csv corona.db
    python main.py csv corona.db corona.csv
"""
from dotenv import load_dotenv

load_dotenv()

from coronadb.cli.main import app  # noqa: E402

if __name__ == "__main__":
    app()
